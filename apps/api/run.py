#!/usr/bin/env python
"""
Entry point for running the LVL.AI API server
"""

import uvicorn

from lvlai_api.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "lvlai_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_dirs=["./src"],
    )
