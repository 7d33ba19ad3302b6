from __future__ import annotations

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler

from .settings import settings
from .services.store import build_store
from .routers import auth, users, ai

# ---------- logging ----------
logger.remove()
logger.add(
    lambda msg: print(msg, end=""),
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level=settings.LOG_LEVEL,
)

STARTED_AT = time.monotonic()

# ---------- store lifecycle ----------
@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.store = build_store(settings)
    logger.info(f"ChatBuddy API up (mock={settings.MOCK_MODE}, model={settings.OPENAI_MODEL})")
    try:
        yield
    finally:
        await app.state.store.close()

# ---------- app / limiter ----------
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
app = FastAPI(title="ChatBuddy API", version="1.0.0", lifespan=lifespan)
app.state.limiter = limiter

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

# SlowAPI middleware + handler
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception(f"Server error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})

# ---------- health ----------
@app.get("/api/health")
def health():
    return {
        "status": "OK",
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "mock": settings.MOCK_MODE,
        "model": settings.OPENAI_MODEL,
    }

# ---------- routers ----------
app.include_router(auth.router, tags=["auth"])
app.include_router(users.router, tags=["users"])
app.include_router(ai.router, tags=["ai"])

def run():
    import uvicorn
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
