"""Main FastAPI application"""
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from bibforms.config import get_settings
from bibforms.middleware.cors import setup_cors
from bibforms.middleware.error_handler import setup_error_handling
from bibforms.services.scheduler import NotificationScheduler

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    # Startup
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"n8n webhook: {'configured' if settings.webhook_enabled else 'not configured'}")
    yield
    # Shutdown: let detached notifications finish
    await app.state.notification_scheduler.shutdown(settings.notify_shutdown_grace_seconds)


# Create FastAPI app with lifespan
app = FastAPI(
    title="BibForms API",
    description="Form builder and submission API",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

app.state.notification_scheduler = NotificationScheduler()

# Setup CORS
setup_cors(app)

# Domain error mapping and the catch-all 500 handler
setup_error_handling(app)


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "bibforms-backend",
        "webhook": "enabled" if get_settings().webhook_enabled else "disabled",
        "pending_notifications": app.state.notification_scheduler.pending
    }


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "BibForms Backend API",
        "version": "1.0.0",
        "docs": "/docs"
    }

# Import and include routers
from bibforms.routers import admin, forms, responses

app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])
app.include_router(responses.router, prefix="/api/responses", tags=["Responses"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3110)
