from __future__ import annotations

from fastapi import FastAPI, Request, Header
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
from .routers import upload, library, quiz, premium, admin
from .services.quiz import QuizError

# ---------- logging ----------
logger.remove()
logger.add(
    lambda msg: print(msg, end=""),
    format="{time:YYYY-MM-DD HH:mm:ss} | {level:<8} | {message}",
    level="INFO",
)

# ---------- app / limiter ----------
limiter = Limiter(key_func=get_remote_address, default_limits=[settings.RATE_LIMIT])
app = FastAPI(title="StudyCards API", version="1.0.0")
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

# ---------- quiz errors ----------
@app.exception_handler(QuizError)
async def quiz_error_handler(request: Request, exc: QuizError):
    logger.info(f"[quiz] {request.url.path}: {exc}")
    return JSONResponse(status_code=422, content={"detail": str(exc)})

# ---------- health / whoami ----------
@app.get("/health")
def health():
    return {
        "ok": True,
        "mock": settings.MOCK_MODE,
        "model": settings.OPENAI_MODEL,
        "rate_limit": settings.RATE_LIMIT,
        "max_pages": settings.MAX_PAGES,
        "max_upload_mb": settings.MAX_UPLOAD_MB,
    }

@app.get("/whoami")
def whoami(Authorization: str | None = Header(default=None)):
    return {"user_id": user_id_from_auth_header(Authorization)}

# ---------- routers ----------
app.include_router(upload.router, tags=["upload"])
app.include_router(library.router, tags=["library"])
app.include_router(quiz.router, tags=["quiz"])
app.include_router(premium.router, tags=["premium"])
app.include_router(admin.router, tags=["admin"])
