"""API REST (FastAPI) sobre el snapshot del motor."""

from zonepulse.app.api.routes import init_routes, router

__all__ = ["init_routes", "router"]
