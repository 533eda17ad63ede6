"""
threadhub.api - FastAPI REST API

Usage:
    uvicorn threadhub.api.main:app --reload
"""

from threadhub.api.main import app, create_app

__all__ = ["app", "create_app"]
