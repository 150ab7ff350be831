"""HTTP entry point for the diff check service."""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING

import uvicorn
from starlette.applications import Starlette
from starlette.concurrency import run_in_threadpool
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from diffcheck_service import __version__
from diffcheck_service.checks.dispatcher import CommitCheckDispatcher
from diffcheck_service.inspection.engine import DetectSecretsEngine
from diffcheck_service.models.config import ConfigError, ServiceConfig
from diffcheck_service.tools.github import create_github_client
from diffcheck_service.utils.logging import configure_logging, get_logger
from diffcheck_service.webhook.intake import WebhookIntake

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request

logger = get_logger("main")

PROBLEM_CONTENT_TYPE = "application/problem+json"


def build_dispatcher(config: ServiceConfig) -> CommitCheckDispatcher:
    """Wire the dispatcher to GitHub and the default inspection engine."""
    return CommitCheckDispatcher(
        github_client=create_github_client(config),
        engine=DetectSecretsEngine(),
        max_workers=config.check_workers,
        shutdown_grace=config.shutdown_grace,
    )


def create_app(
    config: ServiceConfig,
    dispatcher: CommitCheckDispatcher | None = None,
) -> Starlette:
    """Create the Starlette application.

    Args:
        config: Service configuration.
        dispatcher: Dispatcher for commit checks. Built from ``config``
            when not given.

    Returns:
        The ASGI application.
    """
    if dispatcher is None:
        dispatcher = build_dispatcher(config)

    intake = WebhookIntake(config.webhook_secret, dispatcher)

    async def webhook_route(request: Request) -> Response:
        """Accept a GitHub delivery; the body stays empty on success."""
        result = await intake.handle(request.headers, request.body)
        if result.problem is not None:
            return JSONResponse(
                content=result.problem.to_dict(),
                status_code=result.status_code,
                media_type=PROBLEM_CONTENT_TYPE,
            )
        return Response(status_code=result.status_code)

    async def health_route(request: Request) -> JSONResponse:
        del request  # unused but required by Starlette routing
        return JSONResponse({"status": "healthy", "version": __version__})

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        del app
        logger.info("Started", extra={"port": config.port, "version": __version__})
        yield
        logger.info("Shutting down")
        await run_in_threadpool(dispatcher.shutdown)
        logger.info("Exiting")

    return Starlette(
        routes=[
            Route("/push", webhook_route, methods=["POST"]),
            Route("/webhook", webhook_route, methods=["POST"]),
            Route("/health", health_route, methods=["GET"]),
        ],
        lifespan=lifespan,
    )


def main() -> None:
    """Load configuration from the environment and serve until signalled.

    uvicorn turns SIGTERM and SIGINT into a lifespan shutdown, which logs
    and releases the dispatcher before the process exits.
    """
    configure_logging()

    try:
        config = ServiceConfig.from_env()
    except ConfigError as e:
        logger.error("Failed to start", extra={"error": str(e)})
        raise SystemExit(1) from e

    uvicorn.run(create_app(config), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
