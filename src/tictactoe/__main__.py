"""Entry point for running Tic Tac Toe via ``python -m tictactoe``."""

from __future__ import annotations

import logging

import uvicorn

from .config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def main() -> None:
    """Start the FastAPI-powered Tic Tac Toe web server."""

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    logging.getLogger(__name__).info(
        "Serving on %s:%d (leaderboard: %s)",
        settings.host,
        settings.port,
        settings.leaderboard_path,
    )
    uvicorn.run(
        "tictactoe.ui:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
