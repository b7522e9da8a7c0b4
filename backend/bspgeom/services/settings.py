"""
Runtime configuration for the partitioning service.

Settings are read once from environment variables and validated with a
pydantic model.  They provide the default tolerance used when callers
(or API requests) do not supply one, and the host/port used by
``run.py``.

Environment variables:

``BSPGEOM_TOLERANCE``
    Distance below which points are considered identical (default
    ``1e-10``).
``BSPGEOM_DEBUG``
    When truthy, tree construction and loop insertion emit debug logs.
``BSPGEOM_HOST`` / ``BSPGEOM_PORT``
    Address the Uvicorn server binds to.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Validated service settings."""

    tolerance: float = Field(default=1e-10, gt=0.0, description="Default geometric tolerance")
    debug: bool = Field(default=False, description="Emit debug logs from the core algorithms")
    host: str = Field(default="0.0.0.0", description="Interface the HTTP server binds to")
    port: int = Field(default=8000, ge=1, le=65535, description="Port the HTTP server listens on")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings, read from the environment once."""
    values = {}
    if os.getenv("BSPGEOM_TOLERANCE"):
        values["tolerance"] = os.environ["BSPGEOM_TOLERANCE"]
    if os.getenv("BSPGEOM_DEBUG"):
        values["debug"] = os.environ["BSPGEOM_DEBUG"].strip().lower() in _TRUTHY
    if os.getenv("BSPGEOM_HOST"):
        values["host"] = os.environ["BSPGEOM_HOST"]
    if os.getenv("BSPGEOM_PORT"):
        values["port"] = os.environ["BSPGEOM_PORT"]
    settings = Settings(**values)
    logger.debug("Loaded settings: %s", settings)
    return settings
