"""CORS middleware configuration"""
from fastapi.middleware.cors import CORSMiddleware
from bibforms.config import get_settings


def setup_cors(app):
    """
    Configure CORS for the form-builder frontend

    Content-Disposition is exposed so the browser can read the CSV export
    file name.

    Args:
        app: FastAPI application instance
    """
    settings = get_settings()
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Content-Disposition"],
    )
