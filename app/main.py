"""
Main FastAPI application entry point.
"""
import logging
import os

import uvicorn

from app.create_app import get_app
from app.utils.constants import ConfigFile

logging.basicConfig(level=logging.DEBUG)

app = get_app(os.environ.get("EMISSIONS_CONFIG", ConfigFile.DEVELOPMENT))


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Emissions Calculation & Audit-Trail Engine",
        "version": app.version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "emissions-audit-engine"}


if __name__ == "__main__":
    try:
        uvicorn.run(
            app,
            host="0.0.0.0",
            port=int(os.environ.get("PORT", 8000)),
            log_level="debug",
            loop="asyncio",
        )
    except Exception as e:
        logging.error(f"Error running FastAPI: {e}")
