"""
FastAPI application factory for the prompt gateway.

Endpoints:
  POST /api/prompt       - Forward a prompt upstream, return the result envelope
  GET  /api/healthcheck  - Liveness check
"""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.requests import ClientDisconnect

from .client import Failed, UpstreamClient
from .config import Settings, get_settings
from .models import EmptyChoicesError, Message, Prompt, ResultEnvelope

logger = logging.getLogger(__name__)

PROMPT_PATH = "/api/prompt"


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def parse_prompt(body: bytes) -> Prompt:
    """
    Decode a request body into a Prompt.

    A literal JSON null decodes to an empty Prompt, matching the
    permissive behavior callers already rely on. Anything else that is not
    a JSON object with string fields is rejected, including input nested
    past the JSON parser's depth limit.

    Raises:
        ValueError: with a message suitable for the caller
    """
    if body.strip() == b"null":
        return Prompt()

    try:
        return Prompt.model_validate_json(body)
    except (ValidationError, UnicodeDecodeError) as e:
        raise ValueError(f"invalid prompt: {e}") from e


def create_app(
    settings: Optional[Settings] = None,
    client_factory: Optional[Callable[[Settings], UpstreamClient]] = None,
    title: str = "Prompt Gateway",
    description: str = "Forwards prompts to a chat-completion endpoint",
) -> FastAPI:
    """
    Create the gateway application.

    Args:
        settings: Configuration; defaults to get_settings()
        client_factory: Builds the UpstreamClient during startup.
                        Tests pass one wired to a mock transport.
        title: OpenAPI title
        description: OpenAPI description

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    client_factory = client_factory or UpstreamClient

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Prompt gateway starting up")
        app.state.upstream = client_factory(settings)
        logger.info("Model: %s", app.state.upstream.model_name)

        yield

        logger.info("Prompt gateway shutting down")
        await app.state.upstream.aclose()

    app = FastAPI(
        title=title,
        description=description,
        version=settings.version,
        lifespan=lifespan,
    )

    @app.api_route("/api/healthcheck", methods=["GET", "HEAD"], response_class=PlainTextResponse)
    async def healthcheck():
        """Health check endpoint."""
        return "ok"

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException):
        """Give every non-POST call to the prompt endpoint the same error body."""
        if exc.status_code == 405 and request.url.path == PROMPT_PATH:
            response = error_response(405, f"method {request.method} not allowed")
            response.headers.update(exc.headers or {})
            return response
        return await http_exception_handler(request, exc)

    @app.post(PROMPT_PATH)
    async def prompt(request: Request):
        """Prompt forwarding endpoint."""
        try:
            body = await request.body()
        except ClientDisconnect:
            body = b""

        try:
            parsed = parse_prompt(body)
        except ValueError as e:
            logger.warning("Rejected prompt: %s", e)
            return error_response(400, str(e))

        messages = [
            Message(role="system", content=parsed.context),
            Message(role="user", content=parsed.message),
        ]

        upstream: UpstreamClient = request.app.state.upstream
        result = await upstream.send(messages)
        if isinstance(result, Failed):
            return error_response(424, result.cause)

        try:
            envelope = ResultEnvelope.from_completion(result.response)
        except EmptyChoicesError as e:
            logger.error("Upstream error: %s", e)
            return error_response(424, str(e))

        return JSONResponse(status_code=200, content=envelope.model_dump())

    return app
