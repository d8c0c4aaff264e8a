"""FastAPI application for git-branch-manager.

The app is a thin HTTP layer over ``BranchService``. One service (with its
cache and mutation serializer) is created per app and stored on
``app.state``; the cache sweep and the first background refresh live and
die with the app's lifespan.
"""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from git_branch_manager.__version__ import __version__
from git_branch_manager.api.errors import register_exception_handlers
from git_branch_manager.api.routes import router
from git_branch_manager.config import Config
from git_branch_manager.services.branch_service import BranchService
from git_branch_manager.utils.logging import get_logger

logger = get_logger(__name__)


def create_app(config: Config, service: Optional[BranchService] = None) -> FastAPI:
    """Build the application.

    Args:
        config: Application configuration
        service: Pre-built service (tests); created from config if omitted
    """
    service = service or BranchService(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tasks = [asyncio.create_task(service.sweep_cache())]
        if config.background_update_interval:
            tasks.append(asyncio.create_task(service.initial_background_update()))
        logger.info(f"Using repository at: {Path(config.repository_path).resolve()}")
        try:
            yield
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            await service.shutdown()

    app = FastAPI(title="Git Branch Manager", version=__version__, lifespan=lifespan)
    app.state.config = config
    app.state.branch_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(router)

    # Built front end, served after the API routes so they take precedence
    if config.static_dir:
        static_dir = Path(config.static_dir)
        if static_dir.is_dir():
            logger.info(f"Serving frontend from: {static_dir.resolve()}")
            app.mount("/", StaticFiles(directory=static_dir, html=True), name="frontend")
        else:
            logger.warning(f"Static directory not found, frontend disabled: {static_dir}")

    return app
