from __future__ import annotations

import sys

from fastapi import FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler

from .settings import settings
from .auth import user_id_from_auth_header
from .errors import QuizError
from .routers import generate, results

# ---------- logging ----------
logger.remove()
logger.add(
    sys.stdout,
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level=settings.LOG_LEVEL,
)

# ---------- app / limiter ----------
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
app = FastAPI(title="QuizMaker API", version="1.0.0")
app.state.limiter = limiter

# ---------- CORS ----------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "Authorization", "Content-Type", "X-Requested-With"],
    expose_headers=["Authorization"],
)

# SlowAPI middleware + handler
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ---------- errors ----------
@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "Invalid request body.")
    return JSONResponse(
        status_code=400,
        content={"error": f"{where}: {msg}" if where else msg, "code": "validation"},
    )

@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"[app] unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=QuizError("Unexpected server error").to_dict())

# ---------- health / whoami ----------
@app.get("/health")
def health():
    return {
        "ok": True,
        "mock": settings.MOCK_MODE,
        "model": settings.OPENAI_MODEL,
        "rate_limit": settings.RATE_LIMIT,
        "llm_timeout_seconds": settings.LLM_TIMEOUT_SECONDS,
    }

@app.get("/whoami")
def whoami(Authorization: str | None = Header(default=None)):
    return {"user_id": user_id_from_auth_header(Authorization)}

# ---------- routers ----------
app.include_router(generate.router, tags=["generate"])
app.include_router(results.router, tags=["results"])
