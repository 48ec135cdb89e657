"""
FormHook - form submissions forwarded to webhooks

FastAPI application entry point.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import observability modules
from formhook.config import settings
from formhook.logging_config import configure_logging
from formhook.sentry_config import configure_sentry
from formhook.middleware.logging import LoggingMiddleware
from formhook.routes.metrics import router as metrics_router

# Import route modules
from formhook.routes.forms import router as forms_router
from formhook.routes.webhooks import router as webhooks_router
from formhook.routes.public import router as public_router
from formhook.routes.submissions import router as submissions_router

# Initialize logging first
configure_logging()

# Initialize Sentry (if SENTRY_DSN is set)
configure_sentry()

# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Collects form submissions and forwards them to configurable webhooks",
)

# Add logging middleware FIRST (runs before other middleware)
app.add_middleware(LoggingMiddleware)

# Add CORS middleware so the form builder and embedded forms can call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include metrics endpoint FIRST (so it's always available)
app.include_router(metrics_router)

# Include public form routes
app.include_router(public_router)

# Include form management routes
app.include_router(forms_router)

# Include webhook configuration routes
app.include_router(webhooks_router)

# Include submission and webhook log routes
app.include_router(submissions_router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running"
    }


@app.get("/health")
async def health():
    """Detailed health check."""
    return {
        "status": "healthy",
        "database": "connected"
    }
