"""Task tools for ClickUp MCP integration.

This module exposes the TaskTools class, which wires the task handlers to a
FastMCP instance. Handler implementations live in smaller modules.
"""

import logging
from collections.abc import Mapping
from typing import Any

from fastmcp import FastMCP
from fastmcp.server.context import Context as ServerContext

from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.tools.tasks_get import get_task_tool as get_task_tool_fn
from clickup_mcp.tools.tasks_get import run_get_task as run_get_task_fn
from clickup_mcp.tools.tasks_list import RetrievalSettings, TaskRetriever
from clickup_mcp.tools.tasks_list import list_tasks_tool as list_tasks_tool_fn
from clickup_mcp.tools.tasks_list import run_list_tasks as run_list_tasks_fn

# Configure logger to write to stderr
logger = logging.getLogger(__name__)

TOOL_NAMES: tuple[str, ...] = ("clickup_list_tasks", "clickup_get_task")


class TaskTools:
    """Task tools exposing ClickUp task retrieval over MCP.

    The same handlers are reused by the plain HTTP routes through
    ``run_list_tasks`` and ``run_get_task``.
    """

    def __init__(
        self,
        mcp_instance: FastMCP,
        clickup_client: ClickUpClient,
        settings: RetrievalSettings,
    ) -> None:
        """Initialize TaskTools with MCP instance, ClickUp client and retrieval settings.

        Args:
            mcp_instance: FastMCP server instance for registering tools
            clickup_client: ClickUp API client for data retrieval
            settings: Active list catalog, invoicing list and limits
        """
        self.mcp = mcp_instance
        self.clickup_client = clickup_client
        self.retriever = TaskRetriever(clickup_client, settings)
        self._register_tools()

    async def run_list_tasks(self, params: Mapping[str, Any]) -> tuple[int, dict[str, Any]]:
        """Run clickup_list_tasks with raw parameters; returns (status_code, body)."""
        return await run_list_tasks_fn(self.retriever, params)

    async def run_get_task(self, task_id: str | None) -> tuple[int, dict[str, Any]]:
        """Run clickup_get_task; returns (status_code, body)."""
        return await run_get_task_fn(self.clickup_client, task_id)

    async def list_tasks_tool(  # noqa: PLR0913
        self,
        ctx: ServerContext,
        search: str | None = None,
        list_id: str | None = None,
        sector: str | None = None,
        job_number: str | None = None,
        include_invoicing: bool = False,
        limit: int | None = None,
    ) -> dict[str, Any]:
        """List ClickUp tasks."""
        return await list_tasks_tool_fn(
            self.retriever,
            ctx,
            search,
            list_id,
            sector,
            job_number,
            include_invoicing,
            limit,
        )

    async def get_task_tool(self, ctx: ServerContext, task_id: str) -> dict[str, Any]:
        """Retrieve a single ClickUp task."""
        return await get_task_tool_fn(self.clickup_client, ctx, task_id)

    def _register_tools(self) -> None:
        """Register the task tools with the FastMCP instance."""

        async def _list_tasks_tool(  # noqa: PLR0913
            ctx: ServerContext,
            search: str | None = None,
            list_id: str | None = None,
            sector: str | None = None,
            job_number: str | None = None,
            include_invoicing: bool = False,
            limit: int | None = None,
        ) -> dict[str, Any]:
            """Search ClickUp tasks in the active pipeline.

            Filters by free text, sector or job number, newest first. Set
            include_invoicing to append tasks from the invoicing list; a
            job_number search always includes it.
            """
            return await list_tasks_tool_fn(
                self.retriever,
                ctx,
                search,
                list_id,
                sector,
                job_number,
                include_invoicing,
                limit,
            )

        async def _get_task_tool(ctx: ServerContext, task_id: str) -> dict[str, Any]:
            """Retrieve a single ClickUp task by ID."""
            return await get_task_tool_fn(self.clickup_client, ctx, task_id)

        self.mcp.tool("clickup_list_tasks")(_list_tasks_tool)
        self.mcp.tool("clickup_get_task")(_get_task_tool)
