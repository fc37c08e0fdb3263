"""
Movie Night Recommender: FastAPI app factory.

Use: uvicorn recserver.app:create_app --factory
Or:  python -m recserver.server
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import ServerConfig, configure_logging
from .error_handlers import register_exception_handlers
from .routes import register_routes
from .state import AppState

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the embedding model before serving, so the first request does not pay for it."""
    state: AppState = app.state.app_state
    await asyncio.to_thread(state.warmup)
    yield


def create_app(state: Optional[AppState] = None) -> FastAPI:
    """Build FastAPI app with CORS, routes, and error handlers around one AppState."""
    if state is None:
        config = ServerConfig.from_env()
        configure_logging(config.log_level)
        ok, errors = config.validate()
        if not ok:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        state = AppState(config)

    app = FastAPI(
        title="Movie Night Recommender API",
        description="Group movie recommendations from averaged preference embeddings",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.app_state = state
    app.add_middleware(
        CORSMiddleware,
        allow_origins=state.config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    register_routes(app)
    logger.info("[startup] API ready (store=%s, top_k=%d)", state.store_backend, state.engine.config.top_k)
    return app
