"""
Read-only web view of stored channel commands.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import FileResponse, JSONResponse

from macrobot.bot.config import config
from macrobot.managers.channel_manager import ChannelManager
from macrobot.repositories.macro_repository import MacroStoreError
from macrobot.utils.logger import get_logger

logger = get_logger("WebServer")

INDEX_PAGE = Path(__file__).parent / "static" / "index.html"


def create_app(channel_manager_provider) -> FastAPI:
    """
    Create the web app.

    Args:
        channel_manager_provider: Callable returning the current ChannelManager

    Returns:
        FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Web server starting...")
        yield
        logger.info("Web server shutting down...")

    app = FastAPI(
        title="Macro Bot",
        description="Stored channel commands",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.get("/commands")
    async def commands_page():
        """Static listing page."""
        return FileResponse(INDEX_PAGE, media_type="text/html")

    @app.get("/commands/{channel}")
    async def channel_commands(channel: str):
        """Stored macro table of a channel, null when it has none."""
        manager: Optional[ChannelManager] = channel_manager_provider()
        if manager is None:
            return JSONResponse(status_code=503, content={"error": "Bot not ready"})

        # Without a database the tables only exist in memory
        if not manager.repository.is_connected():
            table = manager.get_loaded_table(channel)
            return JSONResponse(content=table.to_dict() if table else None)

        try:
            table = await manager.repository.find_by_channel(channel)
        except MacroStoreError as e:
            logger.error(f"Failed to read commands for {channel}: {e}")
            return JSONResponse(status_code=500, content={"error": str(e)})

        return JSONResponse(content=table.to_dict() if table else None)

    return app


async def start_server(app: FastAPI):
    """Serve the web app until the task is cancelled."""
    import uvicorn

    config_uvicorn = uvicorn.Config(
        app,
        host=config.HOST,
        port=config.PORT,
        log_level="warning",
        access_log=False,
    )
    server = uvicorn.Server(config_uvicorn)

    logger.info(f"Web server listening on port {config.PORT}")
    await server.serve()


async def run_server(app: FastAPI) -> asyncio.Task:
    """Run server in background task."""
    return asyncio.create_task(start_server(app))
