"""
PasteShare — Server Entry Point
===============================

What:  `python -m pasteshare` runs the API under uvicorn.
How:   Host and port come from settings (BACKEND_HOST / BACKEND_PORT).
"""

import uvicorn

from pasteshare.config import settings


def main() -> None:
    uvicorn.run(
        "pasteshare.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
