#!/usr/bin/env python3
"""
Run script for the DODO lullaby backend
"""
import uvicorn

from dodo.config.settings import settings
from dodo.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
