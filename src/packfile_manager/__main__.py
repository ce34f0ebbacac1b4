"""Entry point for the standalone PackFile service."""

import sys

import uvicorn

from packfile_manager.config import settings


def main() -> None:
    uvicorn.run(
        "packfile_manager.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
        reload=not getattr(sys, "frozen", False),
    )


if __name__ == "__main__":
    main()
