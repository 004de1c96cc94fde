"""Serve the analytics API: ``python -m finlens.backend`` or ``finlens-api``."""
from __future__ import annotations

import uvicorn

from .config import settings


def main() -> None:
    uvicorn.run("finlens.backend.app:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
