import asyncio
from openai import (
    OpenAI, APIError, APIStatusError, APIConnectionError, APITimeoutError,
    AuthenticationError, RateLimitError,
)
from loguru import logger
from ..settings import settings

PLACEHOLDER_KEY = "your_openai_api_key_here"

MOCK_QUIZ = (
    "Question: Which organelle is the site of photosynthesis?\n"
    "A) Mitochondrion\nB) Chloroplast\nC) Nucleus\nD) Ribosome\nCorrect: B\n"
    "---\n"
    "Question: Which gas do plants absorb for photosynthesis?\n"
    "A) Oxygen\nB) Nitrogen\nC) Carbon dioxide\nD) Helium\nCorrect: C\n"
    "---\n"
    "Question: What pigment gives leaves their green colour?\n"
    "A) Chlorophyll\nB) Carotene\nC) Melanin\nD) Xanthophyll\nCorrect: A"
)
MOCK_FLASHCARDS = (
    "Front: What is photosynthesis?\n"
    "Back: The process plants use to turn light, water and CO2 into glucose.\n\n"
    "Front: Where does it happen?\n"
    "Back: In the chloroplasts.\n\n"
    "Front: What is released as a by-product?\n"
    "Back: Oxygen.\n\n"
    "Front: Which pigment captures light?\n"
    "Back: Chlorophyll."
)


class AIServiceError(Exception):
    """Upstream LLM failure, carrying the message and HTTP status to surface."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def api_key_configured(key: str | None = None) -> bool:
    key = (settings.OPENAI_API_KEY if key is None else key) or ""
    key = key.strip()
    return bool(key) and key != PLACEHOLDER_KEY and key.startswith("sk-")


_client: OpenAI | None = None

def client() -> OpenAI:
    global _client
    if _client is None:
        _client = OpenAI(
            api_key=settings.OPENAI_API_KEY,
            base_url=settings.OPENAI_BASE_URL,
            timeout=settings.REQUEST_TIMEOUT,
            default_headers={
                "HTTP-Referer": settings.FRONTEND_URL or "http://localhost:5173",
                "X-Title": settings.APP_TITLE,
            },
        )
    return _client


def _mock_reply(messages) -> str:
    sys = (messages[0].get("content", "") if messages else "").lower()
    if "flashcards" in sys:
        return MOCK_FLASHCARDS
    if "quiz" in sys:
        return MOCK_QUIZ
    return "This is a MOCK response."


def translate_error(e: Exception) -> AIServiceError:
    """Map an openai SDK exception onto a user-facing AIServiceError."""
    if isinstance(e, APITimeoutError):
        return AIServiceError("Request timed out. Please check your internet connection.", 504)
    if isinstance(e, APIConnectionError):
        return AIServiceError("Unable to connect to OpenRouter API. Please check your internet connection.", 503)
    if isinstance(e, AuthenticationError):
        return AIServiceError("Invalid API key. Please check your API key in the .env file.", 401)
    if isinstance(e, RateLimitError):
        return AIServiceError("Rate limit exceeded. Please wait a moment and try again.", 429)
    if isinstance(e, APIStatusError):
        text = getattr(e, "message", str(e))
        if e.status_code == 402 or "quota" in text.lower() or "insufficient" in text.lower():
            return AIServiceError("API quota exceeded. You may need to add credits at https://openrouter.ai/credits", 402)
        return AIServiceError(f"API Error: {e.status_code} - {text}", 502)
    if isinstance(e, APIError):
        return AIServiceError(f"API Error: {getattr(e, 'message', str(e))}", 502)
    return AIServiceError(f"AI service error: {e}", 500)


def _require_key():
    if not api_key_configured():
        logger.warning("[ai] API key not configured. Please set OPENAI_API_KEY in your .env file.")
        raise AIServiceError("API key not configured. Please set OPENAI_API_KEY in your .env file.", 500)


def _llm_sync(messages, *, max_tokens=400, temperature=0.7) -> str:
    if settings.MOCK_MODE:
        return _mock_reply(messages)
    _require_key()
    try:
        resp = client().chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=messages,
            max_tokens=max_tokens,
            temperature=temperature,
        )
    except APIError as e:
        logger.error(f"[ai] upstream call failed: {e!r}")
        raise translate_error(e) from e
    choices = getattr(resp, "choices", None)
    if not choices or getattr(choices[0], "message", None) is None:
        logger.error(f"[ai] upstream returned no choices: {resp!r}")
        raise AIServiceError("API Error: empty response from model", 502)
    return (choices[0].message.content or "").strip()


def _ping_sync() -> str:
    if settings.MOCK_MODE:
        return "Hello, AI is working!"
    _require_key()
    try:
        client().models.list()
        logger.info("[ai] basic connectivity test passed")
    except APIError as e:
        logger.error(f"[ai] connectivity test failed: {e!r}")
        raise translate_error(e) from e
    return _llm_sync(
        [{"role": "user", "content": "Say 'Hello, AI is working!' and nothing else."}],
        max_tokens=50, temperature=0.1,
    )


async def llm(messages, **kw) -> str:
    return await asyncio.to_thread(_llm_sync, messages, **kw)

async def ping() -> str:
    return await asyncio.to_thread(_ping_sync)
