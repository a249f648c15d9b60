"""
Main FastAPI application
Quiz-taking and quiz-administration REST service backed by a flat JSON store
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import time

from quizzy.config import settings
from quizzy.database import CorruptStoreError, StoreError, StoreUnavailableError, init_db
from quizzy.api import achievements, admin, emails, questions, quizzes, results, users
from quizzy.services.email_service import EmailDeliveryError

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Quiz-taking and quiz-administration API with results analytics",
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
)


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all requests with timing"""

    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"{request.method} {request.url.path} - "
        f"Status: {response.status_code} - "
        f"Duration: {duration:.3f}s"
    )

    return response


def _format_validation_error(error: dict) -> str:
    location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
    field = ".".join(location)
    message = error.get("msg", "Invalid value")
    return f"{field}: {message}" if field else message


# Request schema violations
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report every request schema violation at once"""

    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "details": [_format_validation_error(e) for e in exc.errors()]
        }
    )


# HTTP exception handler
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Format HTTP exceptions consistently, including unmatched routes"""

    content = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
    return JSONResponse(
        status_code=exc.status_code,
        content=content,
        headers=getattr(exc, "headers", None)
    )


# Store failures
@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    """Store errors are fatal for the request; never answered with partial data"""

    status_code = 503 if isinstance(exc, StoreUnavailableError) else 500
    if isinstance(exc, CorruptStoreError):
        logger.error(f"Corrupt store on {request.method} {request.url.path}: {str(exc)}")
    else:
        logger.error(f"Store failure on {request.method} {request.url.path}: {str(exc)}")

    return JSONResponse(
        status_code=status_code,
        content={"error": str(exc)}
    )


@app.exception_handler(EmailDeliveryError)
async def email_exception_handler(request: Request, exc: EmailDeliveryError):
    return JSONResponse(
        status_code=503,
        content={"error": str(exc)}
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected errors gracefully"""

    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)

    content = {"error": "Internal Server Error"}
    if settings.DEBUG:
        content["detail"] = str(exc)

    return JSONResponse(status_code=500, content=content)


# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring

    Returns service status
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": time.time()
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "Quizzy API",
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": "/health"
    }


# Include routers
app.include_router(questions.router)
app.include_router(quizzes.router)
app.include_router(results.router)
app.include_router(users.router)
app.include_router(achievements.router)
app.include_router(admin.router)
app.include_router(emails.router)


# Startup event
@app.on_event("startup")
async def startup_event():
    """Initialize the flat store on startup"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        await init_db()
        logger.info(f"Flat store ready at {settings.DB_PATH}")
    except StoreError as e:
        logger.error(f"Failed to initialize flat store: {str(e)}")
        raise

    logger.info("Application startup complete")


# Shutdown event
@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown"""
    logger.info("Shutting down application")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "quizzy.main:app",
        host="0.0.0.0",
        port=3001,
        reload=settings.DEBUG
    )
