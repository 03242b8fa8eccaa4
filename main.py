"""
Visitor Kiosk API
Development entry point: python main.py
"""

import uvicorn

from app.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        # Use import string so reload/workers work correctly (and avoid warnings).
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
