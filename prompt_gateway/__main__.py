"""
Prompt gateway entry point.

    python -m prompt_gateway
"""

import os
import logging

import uvicorn

from .config import get_settings
from .server import create_app


def main() -> None:
    # Before settings load, so config warnings use this format and level
    log_level = os.getenv("LOG_LEVEL", "info")
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
