import re
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


def _lower_email(value: str) -> str:
    return str(value).lower()


def _validate_password(value: str) -> str:
    password = str(value or "")
    if len(password) < 8:
        raise ValueError("Password must have 8 or more characters")
    if re.search(r"\s", password):
        raise ValueError("Password must not contain spaces")
    return password


class SignUpRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    confirm_password: str

    @field_validator("name")
    @classmethod
    def _name(cls, value: str) -> str:
        name = str(value or "").strip()
        if len(name) < 3:
            raise ValueError("Name must have 3 or more characters")
        return name

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, value: str) -> str:
        return _lower_email(value)

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return _validate_password(value)

    @field_validator("confirm_password")
    @classmethod
    def _confirm(cls, value: str) -> str:
        if len(str(value or "")) < 8:
            raise ValueError("Password must have 8 or more characters")
        return value

    @model_validator(mode="after")
    def _passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


class SignInRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email", mode="after")
    @classmethod
    def _email(cls, value: str) -> str:
        return _lower_email(value)

    @field_validator("password")
    @classmethod
    def _password(cls, value: str) -> str:
        return _validate_password(value)


class UserOut(BaseModel):
    id: str
    name: str
    email: str


class GenerateInterviewRequest(BaseModel):
    role: str
    type: str
    level: str
    techstack: str | list[str] = ""
    # Gathered by voice, so "5" and "five" both arrive here.
    amount: str | int = 5
    userid: str


class TranscriptEntry(BaseModel):
    role: Literal["user", "system", "assistant"]
    content: str


class CreateFeedbackRequest(BaseModel):
    transcript: list[TranscriptEntry] = Field(default_factory=list)


class CreateFeedbackResponse(BaseModel):
    success: bool
    feedback_id: str | None = None
