"""Single task retrieval handler for ClickUp MCP integration."""

import logging
from typing import Any

from fastmcp import Context

from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.api.exceptions import ClickUpAPIError, ClickUpBadRequestError
from clickup_mcp.tools.tasks_common import error_result, serialize_task_detail

logger = logging.getLogger(__name__)

_HTTP_OK = 200
_HTTP_BAD_REQUEST = 400


async def run_get_task(
    clickup_client: ClickUpClient, task_id: str | None
) -> tuple[int, dict[str, Any]]:
    """Fetch one task and return ``(status_code, body)``; never raises."""
    try:
        if not task_id or not task_id.strip():
            raise ClickUpBadRequestError.missing_task_id()
        clickup_client.ensure_configured()
        task = await clickup_client.get_task(task_id.strip())
    except ClickUpAPIError as e:
        status_code, body = error_result(e)
        logger.warning("clickup_get_task %s failed with %s", task_id, status_code)
        return status_code, body
    except Exception as e:
        logger.exception("Unexpected error retrieving task %s", task_id)
        return error_result(e)
    else:
        return _HTTP_OK, serialize_task_detail(task)


async def get_task_tool(
    clickup_client: ClickUpClient, ctx: Context, task_id: str
) -> dict[str, Any]:
    """Retrieve a single ClickUp task by ID.

    Args:
        clickup_client: Injected ClickUpClient
        ctx: MCP context for logging
        task_id: ClickUp task ID

    Returns:
        dict[str, Any]: id, name, url, status, custom_fields; or an error envelope
    """
    await ctx.info(f"Retrieving task {task_id} from ClickUp")
    status_code, body = await run_get_task(clickup_client, task_id)
    if status_code >= _HTTP_BAD_REQUEST:
        await ctx.error(f"Failed to retrieve task {task_id}: {body['error']}")
        return {**body, "status_code": status_code}
    return body
