"""Tests for ClickUpClient.get_tasks() and get_task()."""
# pyright: reportPrivateUsage=false

from __future__ import annotations

from typing import Any

import httpx
import pytest
from pytest_mock import MockerFixture

from clickup_mcp.api.client_tasks import TaskSource
from clickup_mcp.api.exceptions import (
    ClickUpAPIError,
    ClickUpBadRequestError,
    ClickUpNotFoundError,
)
from clickup_mcp.api.models import TaskResponse
from tests.factories import create_custom_field, create_task_payload
from tests.test_api_client_common import HTTP_NOT_FOUND, HTTP_OK, install_transport, make_client


class TestTaskSource:
    """Test source descriptors."""

    def test_endpoints(self) -> None:
        """Workspace and list sources map to their listing endpoints."""
        assert TaskSource.workspace("9001").endpoint == "team/9001/task"
        assert TaskSource.for_list("42").endpoint == "list/42/task"


class TestClickUpClientGetTasks:
    """Test get_tasks query composition and parsing."""

    @pytest.mark.asyncio
    async def test_workspace_fetch_parameters(self, mocker: MockerFixture) -> None:
        """Workspace fetches exclude archived and closed tasks, newest first."""
        client = make_client()
        mock_request = mocker.patch.object(client, "make_request", return_value={"tasks": []})

        await client.get_tasks(TaskSource.workspace("9001"))

        mock_request.assert_called_once_with(
            "GET",
            "team/9001/task",
            params={
                "archived": "false",
                "include_closed": "false",
                "order_by": "created",
                "page": 0,
                "reverse": "true",
                "subtasks": "true",
            },
        )
        assert list(mock_request.call_args.kwargs["params"]) == [
            "subtasks",
            "archived",
            "order_by",
            "reverse",
            "page",
            "include_closed",
        ]

    @pytest.mark.asyncio
    async def test_list_fetch_with_search_and_page_size(self, mocker: MockerFixture) -> None:
        """List fetches keep closed tasks and pass search and limit through."""
        client = make_client()
        mock_request = mocker.patch.object(client, "make_request", return_value={"tasks": []})

        await client.get_tasks(TaskSource.for_list("inv-1"), search="4821", page_size=100)

        _, kwargs = mock_request.call_args
        params: dict[str, Any] = kwargs["params"]
        assert mock_request.call_args.args == ("GET", "list/inv-1/task")
        assert "include_closed" not in params
        assert params["search"] == "4821"
        assert params["limit"] == 100  # noqa: PLR2004
        assert params["archived"] == "false"
        assert params["subtasks"] == "true"

    @pytest.mark.asyncio
    async def test_parses_tasks_in_upstream_order(self) -> None:
        """Tasks come back as TaskResponse objects in upstream order."""
        client = make_client()
        payload = {
            "tasks": [
                create_task_payload(task_id="a", name="First"),
                create_task_payload(
                    task_id="b",
                    name="Second",
                    custom_fields=[create_custom_field("Job Number", "4821")],
                ),
            ]
        }
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(HTTP_OK, json=payload)

        install_transport(client, handler)

        tasks = await client.get_tasks(TaskSource.workspace("9001"), search="kit")

        assert [t.id for t in tasks] == ["a", "b"]
        assert all(isinstance(t, TaskResponse) for t in tasks)
        assert tasks[1].custom_fields[0].value == "4821"
        assert seen[0].url.path == "/api/v2/team/9001/task"
        assert seen[0].url.params["search"] == "kit"

    @pytest.mark.asyncio
    async def test_missing_tasks_key_is_empty(self, mocker: MockerFixture) -> None:
        """A response without a tasks array yields no tasks."""
        client = make_client()
        mocker.patch.object(client, "make_request", return_value={})

        assert await client.get_tasks(TaskSource.for_list("1")) == []

    @pytest.mark.asyncio
    async def test_malformed_task_raises_parse_error(self, mocker: MockerFixture) -> None:
        """A task without an id cannot be parsed."""
        client = make_client()
        mocker.patch.object(client, "make_request", return_value={"tasks": [{"name": "no id"}]})

        with pytest.raises(ClickUpAPIError, match="Failed to parse response"):
            await client.get_tasks(TaskSource.for_list("1"))

    @pytest.mark.asyncio
    async def test_upstream_error_propagates(self) -> None:
        """Upstream failures propagate with status and body."""
        client = make_client()
        install_transport(
            client, lambda _request: httpx.Response(HTTP_NOT_FOUND, text='{"err":"List not found"}')
        )

        with pytest.raises(ClickUpNotFoundError) as exc_info:
            await client.get_tasks(TaskSource.for_list("missing"))

        assert exc_info.value.details == '{"err":"List not found"}'


class TestClickUpClientGetTask:
    """Test single task retrieval."""

    @pytest.mark.asyncio
    async def test_get_task_success(self, mocker: MockerFixture) -> None:
        """The unwrapped task payload is parsed."""
        client = make_client()
        mock_request = mocker.patch.object(
            client, "make_request", return_value=create_task_payload(task_id="abc")
        )

        task = await client.get_task("abc")

        assert task.id == "abc"
        mock_request.assert_called_once_with("GET", "task/abc")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("task_id", ["", "   "])
    async def test_get_task_requires_id(self, task_id: str, mocker: MockerFixture) -> None:
        """An empty task id is rejected before any request."""
        client = make_client()
        mock_request = mocker.patch.object(client, "make_request")

        with pytest.raises(ClickUpBadRequestError, match="task_id is required"):
            await client.get_task(task_id)
        mock_request.assert_not_called()
