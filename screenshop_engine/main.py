"""
Main FastAPI application for the Screenshop storefront generator
"""
from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from config import settings, validate_required_config
from dependencies import storefront_generator
from exceptions import GenerationError
from logging_config import logger

# Import routers
from routers import generate, wizard


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Screenshop Engine", environment=settings.ENVIRONMENT)

    # Validate required configuration
    validate_required_config()

    # Initialize Sentry if DSN provided
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            environment=settings.SENTRY_ENVIRONMENT,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            integrations=[FastApiIntegration()],
        )
        logger.info("Sentry initialized")

    logger.info(
        "Screenshop Engine started",
        claude_model=settings.CLAUDE_MODEL,
        max_tokens=settings.MAX_TOKENS,
        enforce_required_files=settings.ENFORCE_REQUIRED_FILES
    )

    yield

    logger.info("Shutting down Screenshop Engine")
    await storefront_generator.aclose()


# Create FastAPI app
app = FastAPI(
    title="Screenshop Engine",
    description="Turns ecommerce screenshots into a Next.js storefront",
    version="1.0.0",
    lifespan=lifespan
)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in settings.CORS_ORIGINS.split(",")
    if origin.strip()
]

# Wildcard origins in development only
if settings.ENVIRONMENT == "development" or settings.DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,  # Cannot use credentials with wildcard origins
        allow_methods=["*"],
        allow_headers=["*"],
    )
else:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Screenshop Engine",
        "version": "1.0.0",
        "status": "running",
        "model": settings.CLAUDE_MODEL
    }


@app.get("/health")
async def health_check():
    """Configuration health check"""
    health = {
        "status": "healthy",
        "version": "1.0.0",
        "timestamp": datetime.utcnow().isoformat(),
        "checks": {}
    }

    health["checks"]["anthropic_api"] = {
        "configured": bool(settings.ANTHROPIC_API_KEY),
        "status": "ok" if settings.ANTHROPIC_API_KEY else "missing"
    }

    health["checks"]["templates"] = {
        "status": "ok" if Path(settings.TEMPLATE_DIR).is_dir() else "missing"
    }

    health["checks"]["shopify"] = {
        "configured": bool(settings.SHOPIFY_STORE_DOMAIN and settings.SHOPIFY_STOREFRONT_ACCESS_TOKEN)
    }

    critical_checks = ["anthropic_api", "templates"]
    all_critical_ok = all(
        health["checks"][check]["status"] == "ok"
        for check in critical_checks
    )

    health["status"] = "healthy" if all_critical_ok else "degraded"

    return health


# Include routers
app.include_router(generate.router, prefix="/api", tags=["Storefront Generation"])
app.include_router(wizard.router, prefix="/api", tags=["Wizard"])


# Error handlers
@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    """Render pipeline failures as {"error": message}"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        error=exc.message,
        error_type=type(exc).__name__,
        status_code=exc.status_code,
        path=request.url.path
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client input errors, rendered like the rest"""
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if field:
        message = f"Invalid {field}: {message}"

    logger.warning(
        "Request validation failed",
        error=message,
        error_count=len(errors),
        path=request.url.path
    )
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler with Sentry integration"""
    logger.error(
        "Unhandled exception",
        error=str(exc),
        path=request.url.path,
        exc_info=True
    )

    if settings.SENTRY_DSN:
        sentry_sdk.capture_exception(exc)

    return JSONResponse(
        status_code=500,
        content={"error": str(exc) or "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    # Only enable reload in development
    reload_enabled = settings.ENVIRONMENT == "development" or settings.DEBUG
    uvicorn.run("main:app", host="0.0.0.0", port=8001, reload=reload_enabled)
