#!/usr/bin/env python3
"""
Скрипт для запуску backend сервера
"""
import os
import uvicorn

if __name__ == "__main__":
    # reload лише для розробки: MAP_EDITOR_RELOAD=1
    reload = os.getenv("MAP_EDITOR_RELOAD", "0") == "1"
    uvicorn.run(
        "main:app",
        host=os.getenv("MAP_EDITOR_HOST", "0.0.0.0"),
        port=int(os.getenv("MAP_EDITOR_PORT", "8000")),
        reload=reload,
        log_level="info",
        loop="asyncio",
    )
