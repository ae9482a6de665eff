from fastapi import FastAPI

from . import __version__
from .models import RouteTable
from .routes import build_route_router, echo_router


def create_app(route_table: RouteTable) -> FastAPI:
    """Build the application shared by the plain and TLS listeners."""
    app = FastAPI(
        title="Mock HTTP Server",
        description="Canned GET responses and request echo for client integration tests",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.route_table = route_table

    app.include_router(echo_router, tags=["echo"])
    app.include_router(build_route_router(route_table), tags=["routes"])
    return app
