"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
error handlers and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api.chat import router as chat_router
from src.proxy.inference import InferenceError, close_inference_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Closes the upstream HTTP client on shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    logger.info("Starting LLM Chat API...")
    yield
    await close_inference_service()
    logger.info("Shutting down LLM Chat API...")


async def inference_error_handler(request: Request, exc: InferenceError) -> JSONResponse:
    """Map upstream failures to a generic 500 body."""
    logger.error(f"Error processing chat request: {exc}")
    return JSONResponse(
        {"error": "Failed to process request"},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="LLM Chat API",
        description=(
            "Thin proxy between the chat UI and a hosted language model. "
            "Forwards the conversation transcript and passes streamed or "
            "whole responses through unmodified."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    application.add_exception_handler(InferenceError, inference_error_handler)
    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "llm-chat"}

    return application


app = create_app()
