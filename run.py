"""
Entry point for the partitioning service.

Running this script with ``python run.py`` will start the FastAPI
server exposing the loop orientation and region API.  The application
defined in ``backend/bspgeom/main.py`` is imported after adjusting the
Python path to include the repository root.
"""

from __future__ import annotations

import sys
from pathlib import Path

import logging
import uvicorn


def main() -> None:
    """Run the Uvicorn server hosting the partitioning service."""
    # Determine the repository root relative to this file and ensure it is on
    # sys.path so that ``backend`` can be imported as a package.
    repo_root = Path(__file__).resolve().parent
    if str(repo_root) not in sys.path:
        sys.path.append(str(repo_root))

    # Import inside main() to avoid modifying sys.path at module import time.
    from backend.bspgeom.main import app  # type: ignore
    from backend.bspgeom.services.settings import get_settings  # type: ignore

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
