import asyncio
import logging
import os

import uvicorn

logger = logging.getLogger(__name__)


async def start_servers():
    config = uvicorn.Config(
        "lease_service.app.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8003)),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )
    server = uvicorn.Server(config)

    await server.serve()

if __name__ == "__main__":
    try:
        asyncio.run(start_servers())
    except KeyboardInterrupt:
        logger.info("Shutting down server...")
