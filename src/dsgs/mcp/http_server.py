"""Connection-oriented transport: one JSON envelope per HTTP request.

Every path is served by the same handler. Transport status is always 200
(204 for preflight); failures are reported only inside the envelope.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from dsgs.config import settings
from dsgs.errors.exceptions import InternalError, InvalidRequestError
from dsgs.mcp.dispatcher import Dispatcher
from dsgs.models.envelope import METHOD_NOT_ALLOWED_ID, SERVER_ERROR_ID
from dsgs.models.envelope import Response as Envelope

logger = logging.getLogger(__name__)

CORS_HEADERS = {"Access-Control-Allow-Origin": "*"}
PREFLIGHT_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}
_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]


def create_app(
    dispatcher: Dispatcher | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
) -> FastAPI:
    """Create the HTTP transport application around *dispatcher*.

    *host* and *port* are the bound address, used only for log output; they
    default to the configured values.
    """
    dispatcher = dispatcher or Dispatcher()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("MCP server running at http://%s:%s", app.state.host, app.state.port)
        yield
        logger.info("MCP server shutdown complete")

    app = FastAPI(
        title="DSGS MCP server",
        version=settings.server_version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.dispatcher = dispatcher
    app.state.host = settings.host if host is None else host
    app.state.port = settings.port if port is None else port

    @app.api_route("/{path:path}", methods=_ALL_METHODS)
    async def handle(request: Request) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)

        if request.method != "POST":
            exc = InvalidRequestError("Method not allowed")
            envelope = Envelope.failure(METHOD_NOT_ALLOWED_ID, exc.code, exc.message)
            return JSONResponse(envelope.to_dict(), headers=CORS_HEADERS)

        try:
            body = await request.body()
            payload = await request.app.state.dispatcher.dispatch_raw(body)
        except Exception:
            logger.exception("HTTP transport failure")
            exc = InternalError()
            payload = Envelope.failure(SERVER_ERROR_ID, exc.code, exc.message).to_dict()
        return JSONResponse(payload, headers=CORS_HEADERS)

    return app
