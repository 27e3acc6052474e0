"""
FastAPI Production Server

Run the Chatrix API in production mode. With the default "memory://" rate-limit
storage, run a single worker process; set RATE_LIMIT_STORAGE_URI to a redis
URI before adding workers.

Usage:
    python scripts/run-prod.py
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))
os.chdir(project_root)

import uvicorn
from loguru import logger

from chatrix.utils.logger import setup_logger


def main():
    """Start the FastAPI production server"""
    setup_logger()
    logger.info("="*80)
    logger.info("Chatrix - AI Chat API Server (Production)")
    logger.info("="*80)
    logger.info("AI Chat: POST http://0.0.0.0:8000/api/ai/chat")
    logger.info("="*80)

    uvicorn.run(
        "chatrix.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=False,
        workers=1,
        log_level="info",
        access_log=True
    )


if __name__ == "__main__":
    main()
