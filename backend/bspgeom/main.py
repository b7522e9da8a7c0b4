"""
Main application module for the partitioning service.

This file sets up the FastAPI application, configures CORS so browser
clients can make cross-origin requests, and exposes a simple health
check endpoint.

Routers for the loop orientation and region APIs are included under the
`/api` namespace.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.routes_loops import router as loops_router
from .api.routes_regions import router as regions_router


def create_app() -> FastAPI:
    """Factory to create and configure the FastAPI application.

    Returns:
        FastAPI: The configured FastAPI application instance.
    """
    app = FastAPI(title="bspgeom")

    # Allow all origins by default.  In production you should restrict
    # this to the domains that are allowed to access your API.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check endpoint for monitoring and deployment probes.
    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(loops_router, prefix="/api", tags=["loops"])
    app.include_router(regions_router, prefix="/api", tags=["regions"])

    return app


# Create the application instance.  Uvicorn will import this when
# running `uvicorn bspgeom.main:app` from within the backend directory.
app = create_app()
