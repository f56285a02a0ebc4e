"""Task listing handler for ClickUp MCP integration.

Backs the ``clickup_list_tasks`` tool: picks the upstream source, refines the
fetched tasks client-side (search, sector, job number), classifies them into
the active pipeline, optionally appends the invoicing list, then orders and
truncates the result.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from fastmcp import Context
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.config import ConfigDict

from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.api.client_tasks import TaskSource
from clickup_mcp.api.exceptions import (
    ClickUpAPIError,
    ClickUpBadRequestError,
    ClickUpConfigurationError,
)
from clickup_mcp.api.models import TaskResponse
from clickup_mcp.config import ServerConfig
from clickup_mcp.tools.task_filters import (
    ListCatalog,
    apply_query_filters,
    sort_newest_first,
)
from clickup_mcp.tools.tasks_common import error_result, serialize_task_summary

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"true", "1", "yes", "on"})
_HTTP_OK = 200
_HTTP_BAD_REQUEST = 400


class TaskQuery(BaseModel):
    """Caller parameters for clickup_list_tasks.

    Accepts the raw string query parameters of the HTTP route as well as typed
    MCP tool arguments. Blank strings count as "not given".
    """

    model_config = ConfigDict(extra="ignore")

    search: str | None = Field(default=None, description="Free-text search term")
    list_id: str | None = Field(default=None, description="Restrict the fetch to one list")
    sector: str | None = Field(default=None, description="Sector custom field filter")
    job_number: str | None = Field(default=None, description="Job number to look for")
    include_invoicing: bool = Field(
        default=False, description="Append matching tasks from the invoicing list"
    )
    limit: int | None = Field(default=None, gt=0, description="Maximum number of items")

    @field_validator("search", "list_id", "sector", "job_number", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("include_invoicing", mode="before")
    @classmethod
    def _parse_flag(cls, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if value is None:
            return False
        return str(value).strip().lower() in _TRUTHY

    @field_validator("limit", mode="before")
    @classmethod
    def _parse_limit(cls, value: Any) -> int | None:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if isinstance(value, bool):
            msg = "limit must be a positive integer"
            raise ValueError(msg)  # noqa: TRY004 - surfaced as a pydantic ValidationError
        try:
            return int(str(value).strip())
        except ValueError:
            msg = "limit must be a positive integer"
            raise ValueError(msg) from None

    @property
    def upstream_search(self) -> str | None:
        """Term sent to ClickUp's own search; an explicit search wins over a job number."""
        return self.search or self.job_number

    @property
    def wants_invoicing(self) -> bool:
        return self.include_invoicing or self.job_number is not None

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> TaskQuery:
        """Validate caller parameters.

        Raises:
            ClickUpBadRequestError: When a parameter cannot be parsed
        """
        try:
            return cls.model_validate(dict(params))
        except ValidationError as e:
            details = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ClickUpBadRequestError.invalid_parameters(details) from e


@dataclass(frozen=True, slots=True)
class RetrievalSettings:
    """Static retrieval configuration injected into TaskRetriever."""

    active_lists: ListCatalog
    workspace_id: str | None = None
    invoicing_list_id: str | None = None
    default_limit: int = 40
    invoicing_page_size: int = 100

    @classmethod
    def from_config(cls, config: ServerConfig) -> RetrievalSettings:
        return cls(
            active_lists=ListCatalog(config.active_list_names),
            workspace_id=config.clickup_workspace_id,
            invoicing_list_id=config.invoicing_list_id,
            default_limit=config.default_limit,
            invoicing_page_size=config.invoicing_page_size,
        )


class TaskRetriever:
    """Fetch, refine, classify, merge and truncate tasks for one query.

    Holds no per-request state; every call re-fetches from ClickUp. The
    client's connection pool is shared across concurrent calls and is only
    closed at server shutdown.
    """

    def __init__(self, client: ClickUpClient, settings: RetrievalSettings) -> None:
        self._client = client
        self._settings = settings

    def _primary_source(self, query: TaskQuery) -> TaskSource:
        if query.list_id:
            return TaskSource.for_list(query.list_id)
        if not self._settings.workspace_id:
            raise ClickUpConfigurationError.missing_workspace_id()
        return TaskSource.workspace(self._settings.workspace_id)

    def _refine(self, tasks: list[TaskResponse], query: TaskQuery) -> list[TaskResponse]:
        filtered = apply_query_filters(
            tasks, search=query.search, sector=query.sector, job_number=query.job_number
        )
        return sort_newest_first(filtered)

    async def _fetch_invoicing(self, query: TaskQuery, invoicing_list_id: str) -> list[TaskResponse]:
        """Fetch and refine the invoicing pool; upstream failures yield an empty pool."""
        try:
            tasks = await self._client.get_tasks(
                TaskSource.for_list(invoicing_list_id),
                search=query.upstream_search,
                page_size=self._settings.invoicing_page_size,
            )
        except ClickUpAPIError as e:
            logger.warning(
                "Invoicing list %s unavailable (%s); continuing without it",
                invoicing_list_id,
                e.status_code or e,
            )
            return []
        return self._refine(tasks, query)

    async def list_tasks(self, query: TaskQuery) -> dict[str, Any]:
        """Run a task query and build the response envelope.

        Args:
            query: Validated caller parameters

        Returns:
            dict[str, Any]: items, total_returned, active_count, invoicing_count,
            invoicing_included

        Raises:
            ClickUpConfigurationError: Missing API token or workspace ID
            ClickUpAPIError: The primary fetch failed upstream
        """
        self._client.ensure_configured()
        source = self._primary_source(query)
        limit = query.limit or self._settings.default_limit

        fetched = await self._client.get_tasks(source, search=query.upstream_search)

        # Job numbers can live outside the active pipeline, so skip classification
        candidates = (
            fetched
            if query.job_number
            else self._settings.active_lists.active_tasks(fetched)
        )
        active = self._refine(candidates, query)

        invoicing: list[TaskResponse] = []
        invoicing_included = False
        if query.wants_invoicing:
            invoicing_list_id = self._settings.invoicing_list_id
            if invoicing_list_id:
                invoicing = await self._fetch_invoicing(query, invoicing_list_id)
                invoicing_included = True
            else:
                logger.warning("Invoicing requested but no invoicing list is configured")

        logger.info(
            "Fetched %d tasks from %s; %d active, %d invoicing",
            len(fetched),
            source.endpoint,
            len(active),
            len(invoicing),
        )

        # No de-duplication across pools
        merged = active + invoicing
        items = [serialize_task_summary(t) for t in merged[:limit]]

        return {
            "items": items,
            "total_returned": len(items),
            "active_count": len(active),
            "invoicing_count": len(invoicing),
            "invoicing_included": invoicing_included,
        }


async def run_list_tasks(
    retriever: TaskRetriever, params: Mapping[str, Any]
) -> tuple[int, dict[str, Any]]:
    """Execute clickup_list_tasks and return ``(status_code, body)``.

    Never raises: every failure is converted to the structured error envelope.
    """
    try:
        query = TaskQuery.from_params(params)
        result = await retriever.list_tasks(query)
    except ClickUpAPIError as e:
        status_code, body = error_result(e)
        logger.warning("clickup_list_tasks failed with %s: %s", status_code, body["error"])
        return status_code, body
    except Exception as e:
        logger.exception("Unexpected error listing tasks")
        return error_result(e)
    else:
        return _HTTP_OK, result


async def list_tasks_tool(  # noqa: PLR0913
    retriever: TaskRetriever,
    ctx: Context,
    search: str | None = None,
    list_id: str | None = None,
    sector: str | None = None,
    job_number: str | None = None,
    include_invoicing: bool | str = False,
    limit: int | str | None = None,
) -> dict[str, Any]:
    """List ClickUp tasks from the active pipeline, optionally with invoicing.

    Args:
        retriever: Injected TaskRetriever
        ctx: MCP context for logging
        search: Free-text search over name, description and custom fields
        list_id: Only fetch this list instead of the whole workspace
        sector: Match against the "Sector" custom field
        job_number: Match a job number anywhere it may be recorded
        include_invoicing: Append matching tasks from the invoicing list
        limit: Maximum number of items (defaults to the configured limit)

    Returns:
        dict[str, Any]: Result envelope, or ``{error, details?, status_code}``
    """
    await ctx.info("Listing ClickUp tasks")
    status_code, body = await run_list_tasks(
        retriever,
        {
            "search": search,
            "list_id": list_id,
            "sector": sector,
            "job_number": job_number,
            "include_invoicing": include_invoicing,
            "limit": limit,
        },
    )
    if status_code >= _HTTP_BAD_REQUEST:
        await ctx.error(f"Failed to list tasks: {body['error']}")
        return {**body, "status_code": status_code}

    await ctx.info(f"Returning {body['total_returned']} tasks")
    return body
