"""Serve the API with uvicorn: ``python -m factrag.api``."""

import uvicorn

from factrag.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "factrag.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
