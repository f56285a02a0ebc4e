"""Composed ClickUp API client.

This module provides the ClickUpClient class that combines the base HTTP
infrastructure with the task mixin.
"""

from types import TracebackType

from clickup_mcp.api.client_base import BaseClient
from clickup_mcp.api.client_tasks import TasksClientMixin


class ClickUpClient(BaseClient, TasksClientMixin):
    """ClickUp API client used by the gateway tools."""

    def __str__(self) -> str:
        """Return string representation without exposing the API token."""
        return f"ClickUpClient(base_url={self._base_url}, token=***redacted***)"

    def __repr__(self) -> str:
        """Return repr without exposing the API token."""
        return f"ClickUpClient(base_url='{self._base_url}', token='***redacted***')"

    async def __aenter__(self) -> "ClickUpClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit."""
        await super().__aexit__(exc_type, exc_val, exc_tb)


__all__ = ["ClickUpClient"]
