#!/usr/bin/env python3
"""
Run script for the EchoWell backend
"""
import uvicorn

from echowell.config.settings import settings
from echowell.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port, reload=settings.debug)
