"""Common helpers for task tools.

Provides the task projections returned to callers and the mapping from
exceptions to the structured error envelope shared by the MCP tools and the
HTTP routes.
"""

from __future__ import annotations

import logging
from typing import Any

from clickup_mcp.api.exceptions import (
    ClickUpAPIError,
    ClickUpConfigurationError,
    ClickUpNetworkError,
    ClickUpTimeoutError,
)
from clickup_mcp.api.models import TaskResponse

logger = logging.getLogger(__name__)

_HTTP_BAD_GATEWAY = 502
_HTTP_GATEWAY_TIMEOUT = 504
_HTTP_INTERNAL_SERVER_ERROR = 500

ErrorResult = tuple[int, dict[str, Any]]


def _serialize_custom_fields(task: TaskResponse) -> list[dict[str, Any]]:
    return [field.model_dump() for field in task.custom_fields]


def serialize_task_summary(task: TaskResponse) -> dict[str, Any]:
    """Project a task to the list item shape returned by clickup_list_tasks.

    Args:
        task: TaskResponse object to serialize

    Returns:
        dict[str, Any]: id, name, url, status, list, custom_fields, date_created
    """
    return {
        "id": task.id,
        "name": task.name,
        "url": task.url,
        "status": task.status,
        "list": task.list_name,
        "custom_fields": _serialize_custom_fields(task),
        "date_created": task.date_created,
    }


def serialize_task_detail(task: TaskResponse) -> dict[str, Any]:
    """Project a single task for clickup_get_task."""
    return {
        "id": task.id,
        "name": task.name,
        "url": task.url,
        "status": task.status,
        "custom_fields": _serialize_custom_fields(task),
    }


def error_result(error: Exception) -> ErrorResult:
    """Map an exception to an HTTP status code and ``{error, details?}`` body.

    Configuration and validation errors keep their fixed message; upstream
    failures forward ClickUp's status code and body; anything else becomes a
    generic server error.
    """
    if isinstance(error, ClickUpConfigurationError):
        return _HTTP_INTERNAL_SERVER_ERROR, {"error": str(error)}
    if isinstance(error, ClickUpTimeoutError):
        return _HTTP_GATEWAY_TIMEOUT, {"error": "ClickUp error", "details": str(error)}
    if isinstance(error, ClickUpNetworkError):
        return _HTTP_BAD_GATEWAY, {"error": "ClickUp error", "details": str(error)}
    if isinstance(error, ClickUpAPIError):
        body: dict[str, Any] = {"error": str(error)}
        if error.details is not None:
            body["details"] = error.details
        return error.status_code or _HTTP_INTERNAL_SERVER_ERROR, body
    return _HTTP_INTERNAL_SERVER_ERROR, {"error": "Server error", "details": str(error)}
