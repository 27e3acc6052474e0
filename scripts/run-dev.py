"""
FastAPI Development Server

Run the Chatrix API in development mode.

Usage:
    python scripts/run-dev.py
    # OR (after activating venv)
    source .venv/bin/activate
    python scripts/run-dev.py
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
    """Start the FastAPI development server"""
    setup_logger(level="DEBUG")
    logger.info("="*80)
    logger.info("Chatrix - AI Chat API Server")
    logger.info("="*80)
    logger.info("Server will be available at: http://localhost:8000")
    logger.info("API Documentation: http://localhost:8000/docs")
    logger.info("Health Check: http://localhost:8000/health")
    logger.info("AI Chat: POST http://localhost:8000/api/ai/chat")
    logger.info("Press CTRL+C to stop the server")
    logger.info("="*80)

    uvicorn.run(
        "chatrix.api.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
        access_log=True,
        reload_dirs=[str(project_root / "chatrix")]
    )


if __name__ == "__main__":
    main()
