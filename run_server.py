#!/usr/bin/env python3
"""
nftchat server launcher
Runs the FastAPI chat app under uvicorn
"""
import logging
import sys

import uvicorn

from nftchat.config import settings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    logger.info("Starting nftchat server...")
    logger.info(f"Python {sys.version}, encoding={sys.getdefaultencoding()}")
    logger.info(f"HTTP server will run on http://{settings.host}:{settings.port}")
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set; /api/chat will return 500 until it is configured")

    uvicorn.run(
        "nftchat.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
