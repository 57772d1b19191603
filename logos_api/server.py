#!/usr/bin/env python3
"""
Server entry point for the Logos backend.
"""
import uvicorn

from logos_api.config import settings, logger


def main():
    """Run the server."""
    logger.info("Starting Logos on %s:%d", settings.HOST, settings.PORT)

    uvicorn.run(
        "logos_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
