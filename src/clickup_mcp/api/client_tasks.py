"""Tasks mixin for ClickUp API client.

This module provides the TasksClientMixin class with the read-only task
operations used by the gateway, and the TaskSource descriptor that selects
which ClickUp task-listing endpoint a fetch goes to.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, cast

from clickup_mcp.api.exceptions import ClickUpAPIError, ClickUpBadRequestError
from clickup_mcp.api.models import TaskResponse

if TYPE_CHECKING:
    from clickup_mcp.api.protocols import BaseClientProtocol

# Configure logger to write to stderr
logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TaskSource:
    """Upstream scope for a task-listing request: a whole workspace or one list."""

    scope: Literal["team", "list"]
    source_id: str

    @classmethod
    def workspace(cls, workspace_id: str) -> "TaskSource":
        return cls("team", workspace_id)

    @classmethod
    def for_list(cls, list_id: str) -> "TaskSource":
        return cls("list", list_id)

    @property
    def endpoint(self) -> str:
        return f"{self.scope}/{self.source_id}/task"


class TasksClientMixin:
    """Mixin providing task-related operations for ClickUp API client.

    Designed to be composed with BaseClient via multiple inheritance.
    """

    def _get_base_client(self) -> "BaseClientProtocol":
        """Get type-safe access to base client methods."""
        return cast("BaseClientProtocol", self)

    @staticmethod
    def _build_list_query_params(
        source: TaskSource, search: str | None, page_size: int | None
    ) -> dict[str, str | int]:
        """Build the fixed task-listing query string for a source.

        Archived tasks are always excluded and results come newest first; the
        workspace endpoint additionally drops closed tasks.
        """
        query_params: dict[str, str | int] = {
            "subtasks": "true",
            "archived": "false",
            "order_by": "created",
            "reverse": "true",
            "page": 0,
        }
        if source.scope == "team":
            query_params["include_closed"] = "false"
        if search:
            query_params["search"] = search
        if page_size is not None:
            query_params["limit"] = page_size
        return query_params

    def _extract_task_list(
        self, response_data: dict[str, Any], endpoint: str
    ) -> list[TaskResponse]:
        """Parse the wrapped tasks list from API response with error handling."""
        task_list: list[dict[str, Any]] = response_data.get("tasks") or []
        try:
            return [TaskResponse(**task_data) for task_data in task_list]
        except Exception as e:
            logger.exception("Failed to parse task response data")
            task_count = len(task_list) if task_list else "unknown"
            raise ClickUpAPIError.create_parse_error(endpoint, task_count=task_count) from e

    async def get_tasks(
        self,
        source: TaskSource,
        search: str | None = None,
        page_size: int | None = None,
    ) -> list[TaskResponse]:
        """Retrieve one page of tasks for a workspace or a list.

        The API returns tasks in wrapped format: {"tasks": [...]}.

        Args:
            source: Workspace or list to query
            search: Optional upstream search term
            page_size: Optional upstream page size

        Returns:
            List[TaskResponse]: Tasks in upstream order

        Raises:
            ClickUpConfigurationError: API token not configured
            ClickUpAuthenticationError: Invalid API token
            ClickUpNotFoundError: Unknown workspace or list
            ClickUpRateLimitError: Rate limit exceeded
            ClickUpServerError: Server error occurred
            ClickUpNetworkError: Network connectivity error
            ClickUpAPIError: Other API errors
        """
        query_params = self._build_list_query_params(source, search, page_size)

        response_data = await self._get_base_client().make_request(
            "GET", source.endpoint, params=query_params
        )

        tasks = self._extract_task_list(response_data, source.endpoint)
        logger.debug("Successfully retrieved %d tasks from %s", len(tasks), source.endpoint)
        return tasks

    async def get_task(self, task_id: str) -> TaskResponse:
        """Retrieve a single task from the ClickUp API by ID.

        Args:
            task_id: The unique identifier for the task to retrieve

        Returns:
            TaskResponse: Task object from the API

        Raises:
            ClickUpBadRequestError: Empty task ID
            ClickUpNotFoundError: Task not found
            ClickUpAPIError: Other API errors
        """
        if not task_id or not task_id.strip():
            raise ClickUpBadRequestError.missing_task_id()

        endpoint = f"task/{task_id}"
        response_data = await self._get_base_client().make_request("GET", endpoint)

        try:
            task = TaskResponse(**response_data)
        except Exception as e:
            logger.exception("Failed to parse single task response data")
            raise ClickUpAPIError.create_parse_error(endpoint, task_id=task_id) from e
        else:
            logger.debug("Successfully retrieved task: %s", task.id)
            return task
