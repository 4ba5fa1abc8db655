from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.auth import (
    MSG_EMAIL_IN_USE,
    authenticate,
    clear_session_cookie,
    create_account,
    get_current_user,
    set_session_cookie,
)
from app.schemas import SignInRequest, SignUpRequest, UserOut

router = APIRouter(prefix="/api/auth")


@router.post("/sign-up")
async def sign_up(payload: SignUpRequest):
    result = await create_account(name=payload.name, email=payload.email, password=payload.password)
    if not result["success"]:
        status = 409 if result["message"] == MSG_EMAIL_IN_USE else 400
        return JSONResponse(status_code=status, content=result)
    return result


@router.post("/sign-in")
async def sign_in(payload: SignInRequest):
    result = await authenticate(email=payload.email, password=payload.password)
    if not result["success"]:
        return JSONResponse(status_code=401, content={"success": False, "message": result["message"]})

    response = JSONResponse(content={"success": True})
    set_session_cookie(response, result["token"])
    return response


@router.post("/sign-out")
async def sign_out():
    response = JSONResponse(content={"success": True})
    clear_session_cookie(response)
    return response


@router.get("/me", response_model=UserOut)
async def me(user: dict = Depends(get_current_user)):
    return user
