import asyncio
import logging
from openai import AsyncOpenAI
from core.config import LLM_RETRIES, LLM_TIMEOUT_SEC, MODEL_NAME, OPENAI_API_KEY

logger = logging.getLogger("app.ai_reasoning.llm")

client = AsyncOpenAI(api_key=OPENAI_API_KEY)

JSON_SYSTEM_PROMPT = "You are a strict JSON generator. Output JSON only."


async def call_llm(
    prompt: str,
    system: str = JSON_SYSTEM_PROMPT,
    json_mode: bool = True,
    timeout_sec: float = LLM_TIMEOUT_SEC,
    retries: int = LLM_RETRIES,
    temperature: float = 0.4,
) -> str:
    """
    Sends prompt to LLM and returns raw text response.
    MUST return JSON string (caller parses); "{}" after exhausting retries.
    """
    if not str(prompt or "").strip():
        return "{}"

    request: dict = {
        "model": MODEL_NAME,
        "messages": [
            {
                "role": "system",
                "content": system,
            },
            {
                "role": "user",
                "content": prompt,
            },
        ],
        "temperature": temperature,
    }
    if json_mode:
        request["response_format"] = {"type": "json_object"}

    last_error: Exception | None = None
    for attempt in range(max(1, retries + 1)):
        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(**request),
                timeout=timeout_sec,
            )
            message = response.choices[0].message.content
            return str(message or "{}").strip() or "{}"
        except asyncio.TimeoutError as exc:
            last_error = exc
            logger.warning("call_llm timeout | attempt=%s", attempt + 1)
        except Exception as exc:
            last_error = exc
            logger.warning("call_llm failure | attempt=%s err=%s", attempt + 1, exc)

        if attempt < retries:
            await asyncio.sleep(0.35 * (attempt + 1))

    logger.warning("call_llm fallback activated | err=%s", last_error)
    return "{}"
