# app/main.py
"""
FastAPI application entry point.
Includes CORS + request timing middleware, error handlers for the app's
error taxonomy, all routers, and the startup hook that builds the
document classifier.
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from app.routers import admin, analyze, auth, documents, health, vehicles, verify
from app.database import create_tables
from app.config import settings
from app.errors import AnalysisParseError, AppError
from app.services.classifier import build_classifier
from app.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Roadside Compliance API",
    description="AI-assisted vehicle document checks for citizens and police.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS ─────────────────────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


# ── Application Errors ───────────────────────────────────────────────────────
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if isinstance(exc, AnalysisParseError):
        logger.error(f"Analysis failed on {request.url.path}: {exc.message}")
    elif exc.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}", exc_info=exc)
    else:
        logger.info(f"{type(exc).__name__} on {request.url.path}: {exc.message}")

    # 5xx bodies never leak internals
    message = exc.public_message if exc.status_code >= 500 else exc.message
    return _error_response(exc.status_code, message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info(f"Rejected body on {request.url.path}: {exc.errors()}")
    return _error_response(status.HTTP_400_BAD_REQUEST, "Missing required fields")


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(auth.router,      prefix="/api", tags=["🔑 Auth"])
app.include_router(analyze.router,   prefix="/api", tags=["📄 Analyze"])
app.include_router(verify.router,    prefix="/api", tags=["🚓 Verify"])
app.include_router(vehicles.router,  prefix="/api", tags=["🚗 Vehicles"])
app.include_router(documents.router, prefix="/api", tags=["🪪 Documents"])
app.include_router(admin.router,     prefix="/api", tags=["🛡️ Admin"])
app.include_router(health.router,    prefix="/api", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Roadside Compliance API starting up...")
    create_tables()
    logger.info("✅ Database tables ready")

    # Fails startup when ANTHROPIC_API_KEY is missing
    app.state.classifier = build_classifier(settings)
    logger.info(f"🤖 Document classifier ready: {settings.CLASSIFIER_MODEL}")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_IP}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Roadside Compliance API shutting down...")
