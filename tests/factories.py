"""Factory functions for creating test data objects.

Builders for ClickUp-shaped task payloads and TaskResponse objects, keeping
test setup short while leaving the construction explicit.
"""

from collections.abc import Sequence
from typing import Any

from clickup_mcp.api.models import TaskResponse

WORKSPACE_ID = "9001"
INVOICING_LIST_ID = "inv-list-1"
ACTIVE_LIST = "Design - Work in progress"
INVOICING_LIST = "Invoicing"
DEFAULT_CREATED = 1_700_000_000_000


def create_custom_field(name: str, value: Any = None, **extra: Any) -> dict[str, Any]:
    """Create a custom field payload as returned by ClickUp."""
    return {"id": f"cf-{name.lower().replace(' ', '-')}", "name": name, "value": value, **extra}


def create_task_payload(  # noqa: PLR0913
    task_id: str = "task-1",
    name: str = "Task",
    list_name: str | None = ACTIVE_LIST,
    date_created: int | str | None = DEFAULT_CREATED,
    status: str | None = "open",
    text_content: str | None = None,
    custom_fields: Sequence[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Create a raw ClickUp task payload.

    ``date_created`` is sent as a numeric string, like the real API does.
    """
    payload: dict[str, Any] = {
        "id": task_id,
        "name": name,
        "url": f"https://app.clickup.com/t/{task_id}",
        "status": {"status": status, "color": "#d3d3d3", "type": "custom"},
        "list": {"id": f"list-{list_name}", "name": list_name} if list_name else None,
        "date_created": str(date_created) if date_created is not None else None,
        "text_content": text_content,
        "description": text_content,
        "custom_fields": list(custom_fields or []),
        "creator": {"id": 1, "username": "someone"},
    }
    return payload


def create_task_response(**kwargs: Any) -> TaskResponse:
    """Create a TaskResponse from a ClickUp-shaped payload; see create_task_payload."""
    return TaskResponse(**create_task_payload(**kwargs))
