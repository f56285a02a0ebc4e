"""Client-side task predicates and list classification.

ClickUp's search endpoint cannot filter on custom fields, so sector and job
number matching (and a second pass of free-text search) happen here after the
fetch. All predicates are total: missing names, descriptions or field values
are treated as empty strings.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from clickup_mcp.api.models import TaskResponse

_SECTOR_FIELD_MARKER = "sector"
_JOB_NUMBER_FIELD_MARKER = "job number"


def matches_search(task: TaskResponse, term: str) -> bool:
    """Case-insensitive substring search over name, description and custom fields.

    A custom field without a value is matched on its name instead.
    """
    needle = term.lower()
    if needle in task.name.lower():
        return True
    if needle in task.description_text.lower():
        return True
    for field in task.custom_fields:
        normalized = field.field_value
        haystack = normalized.text if normalized is not None else (field.name or "")
        if needle in haystack.lower():
            return True
    return False


def matches_sector(task: TaskResponse, sector: str) -> bool:
    """True when any field named like "sector" has a value containing ``sector``."""
    needle = sector.lower()
    return any(
        _SECTOR_FIELD_MARKER in (field.name or "").lower() and needle in field.value_text.lower()
        for field in task.custom_fields
    )


def matches_job_number(task: TaskResponse, job_number: str) -> bool:
    """Find a job number in the task name, description or a "job number" field.

    Dropdown/label field values are compared on their ``label`` (or ``name``).
    """
    needle = job_number.lower()
    if needle in task.name.lower() or needle in task.description_text.lower():
        return True
    for field in task.custom_fields:
        if _JOB_NUMBER_FIELD_MARKER not in (field.name or "").lower():
            continue
        # equality is a special case of containment
        if needle in field.value_text.lower():
            return True
    return False


def apply_query_filters(
    tasks: Iterable[TaskResponse],
    *,
    search: str | None = None,
    sector: str | None = None,
    job_number: str | None = None,
) -> list[TaskResponse]:
    """Narrow tasks by search, then sector, then job number (all conjunctive)."""
    filtered = list(tasks)
    if search:
        filtered = [t for t in filtered if matches_search(t, search)]
    if sector:
        filtered = [t for t in filtered if matches_sector(t, sector)]
    if job_number:
        filtered = [t for t in filtered if matches_job_number(t, job_number)]
    return filtered


def sort_newest_first(tasks: Iterable[TaskResponse]) -> list[TaskResponse]:
    """Order by creation time descending; undated tasks last, ties keep upstream order."""
    return sorted(tasks, key=lambda t: t.created_sort_key, reverse=True)


class ListCatalog:
    """Case-insensitive catalog of the list names forming the active pipeline."""

    def __init__(self, list_names: Sequence[str]) -> None:
        self._names = frozenset(name.lower() for name in list_names)

    def __contains__(self, list_name: object) -> bool:
        return isinstance(list_name, str) and list_name.lower() in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ListCatalog({sorted(self._names)!r})"

    def is_active(self, task: TaskResponse) -> bool:
        return task.list_name in self

    def active_tasks(self, tasks: Iterable[TaskResponse]) -> list[TaskResponse]:
        return [t for t in tasks if self.is_active(t)]
