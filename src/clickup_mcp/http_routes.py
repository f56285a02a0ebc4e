"""Plain HTTP routes and bearer authentication for the HTTP transport.

Besides the MCP endpoint, the HTTP transport serves the tools as simple GET
routes (``/tools/<name>?param=...``), a ``/tools`` discovery listing and an
unauthenticated ``/health`` probe.
"""

import logging
import secrets

from fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Receive, Scope, Send

from clickup_mcp.tools.tasks import TOOL_NAMES, TaskTools

logger = logging.getLogger(__name__)

_HTTP_UNAUTHORIZED = 401
_PUBLIC_PATHS = frozenset({"/health"})


class BearerAuthMiddleware:
    """Require ``Authorization: Bearer <token>`` on every path except /health."""

    def __init__(self, app: ASGIApp, bearer_token: str) -> None:
        self.app = app
        self._expected = f"Bearer {bearer_token}"

    def _is_authorized(self, scope: Scope) -> bool:
        headers = dict(scope.get("headers", []))
        provided = headers.get(b"authorization", b"").decode("latin-1")
        return secrets.compare_digest(provided.encode(), self._expected.encode())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if (
            scope["type"] == "http"
            and scope.get("path") not in _PUBLIC_PATHS
            and not self._is_authorized(scope)
        ):
            logger.warning("Rejected unauthenticated request to %s", scope.get("path"))
            response = JSONResponse({"error": "Unauthorized"}, status_code=_HTTP_UNAUTHORIZED)
            await response(scope, receive, send)
            return
        await self.app(scope, receive, send)


def register_http_routes(app: FastMCP, task_tools: TaskTools) -> None:
    """Register the health, discovery and tool routes on the FastMCP app."""

    async def health(_request: Request) -> JSONResponse:
        return JSONResponse({"ok": True})

    async def list_tools(_request: Request) -> JSONResponse:
        return JSONResponse({"tools": list(TOOL_NAMES)})

    async def list_tasks(request: Request) -> JSONResponse:
        status_code, body = await task_tools.run_list_tasks(request.query_params)
        return JSONResponse(body, status_code=status_code)

    async def get_task(request: Request) -> JSONResponse:
        status_code, body = await task_tools.run_get_task(request.query_params.get("task_id"))
        return JSONResponse(body, status_code=status_code)

    app.custom_route("/health", methods=["GET"])(health)
    app.custom_route("/tools", methods=["GET"])(list_tools)
    app.custom_route("/tools/clickup_list_tasks", methods=["GET"])(list_tasks)
    app.custom_route("/tools/clickup_get_task", methods=["GET"])(get_task)
