"""Tests for the plain HTTP routes and the bearer gate."""

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from fastmcp import FastMCP
from pytest_mock import MockerFixture
from starlette.middleware import Middleware

from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.api.exceptions import ClickUpAuthenticationError
from clickup_mcp.http_routes import BearerAuthMiddleware, register_http_routes
from clickup_mcp.tools.tasks import TaskTools
from tests.factories import (
    ACTIVE_LIST,
    INVOICING_LIST,
    create_custom_field,
    create_task_response,
)

BEARER = "s3cret-bearer"  # noqa: S105
AUTH = {"Authorization": f"Bearer {BEARER}"}

HTTP_OK = 200
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401


def build_http_client(mcp: FastMCP, bearer: str | None) -> httpx.AsyncClient:
    middleware = [Middleware(BearerAuthMiddleware, bearer_token=bearer)] if bearer else []
    app = mcp.http_app(middleware=middleware)
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver")


@pytest_asyncio.fixture
async def http_client(mcp: FastMCP, task_tools: TaskTools) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client against the gated app."""
    register_http_routes(mcp, task_tools)
    async with build_http_client(mcp, BEARER) as http:
        yield http


class TestBearerGate:
    """Test inbound authentication."""

    @pytest.mark.asyncio
    async def test_health_is_open(self, http_client: httpx.AsyncClient) -> None:
        """/health answers without credentials."""
        response = await http_client.get("/health")

        assert response.status_code == HTTP_OK
        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [{}, {"Authorization": "Bearer wrong"}, {"Authorization": BEARER}],
    )
    async def test_other_paths_require_bearer(
        self, http_client: httpx.AsyncClient, headers: dict[str, str]
    ) -> None:
        """Missing, wrong or unprefixed credentials are rejected."""
        response = await http_client.get("/tools", headers=headers)

        assert response.status_code == HTTP_UNAUTHORIZED
        assert response.json() == {"error": "Unauthorized"}

    @pytest.mark.asyncio
    async def test_rejected_request_never_reaches_clickup(
        self, http_client: httpx.AsyncClient, client: ClickUpClient, mocker: MockerFixture
    ) -> None:
        """The gate runs before any handler."""
        mock_get = mocker.patch.object(client, "get_tasks")

        response = await http_client.get("/tools/clickup_list_tasks")

        assert response.status_code == HTTP_UNAUTHORIZED
        mock_get.assert_not_called()

    @pytest.mark.asyncio
    async def test_open_without_configured_bearer(
        self, mcp: FastMCP, task_tools: TaskTools
    ) -> None:
        """Without a bearer token configured, every route is open."""
        register_http_routes(mcp, task_tools)

        async with build_http_client(mcp, None) as http:
            response = await http.get("/tools")

        assert response.status_code == HTTP_OK


class TestToolRoutes:
    """Test the discovery and tool routes."""

    @pytest.mark.asyncio
    async def test_tools_listing(self, http_client: httpx.AsyncClient) -> None:
        """/tools lists the exposed tool names."""
        response = await http_client.get("/tools", headers=AUTH)

        assert response.json() == {"tools": ["clickup_list_tasks", "clickup_get_task"]}

    @pytest.mark.asyncio
    async def test_list_tasks_route_parses_query_string(
        self, http_client: httpx.AsyncClient, client: ClickUpClient, mocker: MockerFixture
    ) -> None:
        """Query string parameters drive the listing, including the invoicing flag."""
        design = create_task_response(task_id="design", name="Kitchen", list_name=ACTIVE_LIST)
        invoiced = create_task_response(
            task_id="invoiced", name="Kitchen", list_name=INVOICING_LIST
        )

        async def fake_get_tasks(source, search=None, page_size=None):  # noqa: ANN001, ANN202, ARG001
            return [invoiced] if source.scope == "list" else [design, invoiced]

        mocker.patch.object(client, "get_tasks", side_effect=fake_get_tasks)

        response = await http_client.get(
            "/tools/clickup_list_tasks",
            params={"search": "kitchen", "include_invoicing": "true", "limit": "10"},
            headers=AUTH,
        )

        assert response.status_code == HTTP_OK
        body = response.json()
        assert [item["id"] for item in body["items"]] == ["design", "invoiced"]
        assert body["active_count"] == 1
        assert body["invoicing_count"] == 1
        assert body["invoicing_included"] is True

    @pytest.mark.asyncio
    async def test_list_tasks_route_invalid_limit(self, http_client: httpx.AsyncClient) -> None:
        """An invalid limit answers 400."""
        response = await http_client.get(
            "/tools/clickup_list_tasks", params={"limit": "lots"}, headers=AUTH
        )

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.json()["error"] == "Invalid query parameters"

    @pytest.mark.asyncio
    async def test_get_task_route(
        self, http_client: httpx.AsyncClient, client: ClickUpClient, mocker: MockerFixture
    ) -> None:
        """task_id is read from the query string."""
        task = create_task_response(
            task_id="abc", custom_fields=[create_custom_field("Sector", {"label": "Retail"})]
        )
        mock_get = mocker.patch.object(client, "get_task", return_value=task)

        response = await http_client.get(
            "/tools/clickup_get_task", params={"task_id": "abc"}, headers=AUTH
        )

        assert response.status_code == HTTP_OK
        assert response.json()["id"] == "abc"
        assert response.json()["custom_fields"][0]["value"] == {"label": "Retail"}
        mock_get.assert_awaited_once_with("abc")

    @pytest.mark.asyncio
    async def test_get_task_route_without_id(self, http_client: httpx.AsyncClient) -> None:
        """A missing task_id answers 400."""
        response = await http_client.get("/tools/clickup_get_task", headers=AUTH)

        assert response.status_code == HTTP_BAD_REQUEST
        assert response.json() == {"error": "task_id is required"}

    @pytest.mark.asyncio
    async def test_upstream_error_status_is_forwarded(
        self, http_client: httpx.AsyncClient, client: ClickUpClient, mocker: MockerFixture
    ) -> None:
        """ClickUp's status and body are relayed to the HTTP caller."""
        mocker.patch.object(
            client,
            "get_task",
            side_effect=ClickUpAuthenticationError("ClickUp error", details='{"err":"Token invalid"}'),
        )

        response = await http_client.get(
            "/tools/clickup_get_task", params={"task_id": "abc"}, headers=AUTH
        )

        assert response.status_code == HTTP_UNAUTHORIZED
        assert response.json() == {"error": "ClickUp error", "details": '{"err":"Token invalid"}'}
