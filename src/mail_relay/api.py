"""FastAPI application factory for the mail relay.

The service exposes a single endpoint: a ``POST`` with an
``application/json`` body on any path. Every other method or content type
receives ``405 {"error": "Method not allowed"}``. The request body is handed
to :class:`~mail_relay.core.MailRelay` as a stream of chunks.

Example:
    Creating and running the API application::

        from mail_relay.api import create_app

        app = create_app(relay)

        # Run with uvicorn
        uvicorn.run(app, host="0.0.0.0", port=8000)
"""

from typing import AsyncContextManager, Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core import MailRelay
from .logger import get_logger
from .responses import internal_error_response, method_not_allowed_response

logger = get_logger("MailRelayAPI")

JSON_MEDIA_TYPE = "application/json"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _is_json(content_type: Optional[str]) -> bool:
    """True for ``application/json``, parameters such as charset allowed."""
    if not content_type:
        return False
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == JSON_MEDIA_TYPE


def create_app(
    relay: MailRelay,
    lifespan: Optional[Callable[[FastAPI], AsyncContextManager]] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    relay:
        The :class:`mail_relay.core.MailRelay` pipeline, built once at
        startup and shared by every request.
    lifespan:
        Optional lifespan context manager for startup/shutdown events.

    Returns
    -------
    FastAPI
        A configured application ready to be served by Uvicorn or any ASGI
        server.
    """
    # No docs or schema routes: every path belongs to the relay endpoint
    api = FastAPI(
        title="Mail Relay",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    api.state.relay = relay

    @api.exception_handler(StarletteHTTPException)
    async def router_exception_handler(request: Request, exc: StarletteHTTPException) -> Response:
        """Answer methods outside ALL_METHODS with the relay's own 405 body."""
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            logger.error(f"Method not allowed: {request.method}")
            return method_not_allowed_response()
        return await http_exception_handler(request, exc)

    @api.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Log unexpected failures and answer with a JSON 500."""
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return internal_error_response()

    @api.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
    async def relay_endpoint(request: Request, path: str) -> JSONResponse:
        """Relay one JSON-described email."""
        logger.info(f"Request received: {request.method} {request.url.path}")
        if request.method != "POST" or not _is_json(request.headers.get("content-type")):
            logger.error(
                f"Method not allowed: {request.method} "
                f"(content-type: {request.headers.get('content-type') or '-'})"
            )
            return method_not_allowed_response()
        return await request.app.state.relay.handle(request.stream())

    return api
