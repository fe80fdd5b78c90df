"""
Entry point for the split surface application.

Running this script with ``python run.py`` will start the FastAPI
server that exposes the partition API.  The application defined in
``backend/splitsurface/main.py`` is imported after adjusting the Python
path to include the backend directory.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import logging
import uvicorn

logging.basicConfig(
    level=logging.DEBUG if os.getenv("PARTITION_DEBUG") else logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def main() -> None:
    """Run the Uvicorn server hosting the partition API."""
    # Make ``splitsurface`` importable when running from a source checkout.
    backend_dir = Path(__file__).resolve().parent / "backend"
    if str(backend_dir) not in sys.path:
        sys.path.append(str(backend_dir))

    # Import the FastAPI application.  We import inside main() to avoid
    # modifying sys.path at module import time.
    from splitsurface.main import app  # type: ignore

    host = os.getenv("SPLITSURFACE_HOST", "127.0.0.1")
    port = int(os.getenv("SPLITSURFACE_PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
