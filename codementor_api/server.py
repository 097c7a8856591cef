#!/usr/bin/env python3
"""
Server entry point for codementor.
"""
import uvicorn

from codementor_api.config import logger, settings


def main():
    """Run the server."""
    logger.info(f"Starting codementor on {settings.HOST}:{settings.PORT}")

    uvicorn.run(
        "codementor_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
