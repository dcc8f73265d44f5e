"""
Quiz Session Service - FastAPI Application
"""
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .quiz.api import ERROR_STATUS, error_detail, router as quiz_router
from .quiz.errors import QuizSessionError
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    description="Timed quiz sessions with integrity monitoring and scoring",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


# ============================================================================
# Request Logging Middleware
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with timing."""
    start = time.time()
    path = request.url.path
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"Request failed: {request.method} {path}: {e}")
        raise
    duration_ms = int((time.time() - start) * 1000)
    if path not in ["/health", "/favicon.ico"]:
        logger.info(f"{request.method} {path} -> {response.status_code} in {duration_ms}ms")
    return response


@app.exception_handler(QuizSessionError)
async def quiz_error_handler(request: Request, exc: QuizSessionError):
    """Uncaught session errors become JSON errors carrying their code."""
    return JSONResponse(
        status_code=ERROR_STATUS.get(exc.code, 400),
        content={"detail": error_detail(exc)}
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origin
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(quiz_router)


@app.on_event("startup")
async def startup_event():
    """Configure logging on service startup."""
    setup_logging(service_name="quiz-service")
    logger.info(f"Timer tick: {settings.TIMER_TICK_SECONDS}s, visibility warnings: {settings.MAX_VISIBILITY_WARNINGS}")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": settings.APP_NAME
    }
