"""ASGI entry point (``uvicorn setlist_api.app_factory:app``)."""
from setlist_api.app import create_app

app = create_app()

__all__ = ["app", "create_app"]
