"""FastAPI application entry point.

This module builds the FastAPI app, configures CORS and registers the
API routes.  Configuration is validated inside :func:`create_app`, so
missing credentials stop the process before it binds a port.  Serve it
with ``uvicorn --factory src.main:create_app`` or the ``chat-proxy``
console script.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from .config.app_config import AppConfig, get_app_config
from .config.service_config import ServiceConfig, get_service_config
from .controllers.chat_controller import router as chat_router
from .services.inference_client import InferenceClient
from .utils.logger import setup_logging


def create_app(
    service_config: ServiceConfig | None = None,
    inference_client: InferenceClient | None = None,
    app_config: AppConfig | None = None,
) -> FastAPI:
    """Create and configure a FastAPI application.

    When ``inference_client`` is omitted the application builds one
    during startup, authenticates it, and closes it on shutdown.  An
    authentication failure aborts startup.  ``app_config`` drives logging
    and defaults to the environment.
    """
    # Calling setup_logging() initialises Loguru with console and file sinks.
    setup_logging(app_config)
    config = service_config or get_service_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.inference_client is not None:
            yield
            return
        client = InferenceClient(config)
        try:
            await client.connect()
        except Exception:
            await client.aclose()
            raise
        app.state.inference_client = client
        try:
            yield
        finally:
            app.state.inference_client = None
            await client.aclose()
            logger.info("Inference client closed")

    app = FastAPI(title="LLM Chat Proxy", version="0.1.0", lifespan=lifespan)
    app.state.service_config = config
    app.state.inference_client = inference_client

    # Origins come from CORS_ALLOW_ORIGINS; tighten at the ingress as well
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.include_router(chat_router)

    @app.get("/", tags=["Health"])
    async def health() -> dict[str, str]:
        """Liveness probe; independent of the inference service."""
        logger.debug("Health check invoked")
        return {"status": "ok", "message": "Chat proxy is operational"}

    return app


def run(app_config: AppConfig | None = None) -> None:
    """Validate configuration and serve the application with uvicorn."""
    app_config = app_config or get_app_config()
    app = create_app(app_config=app_config)
    uvicorn.run(
        app,
        host=app_config.app_host,
        port=app_config.app_port,
        log_config=None,
    )


if __name__ == "__main__":
    run()
