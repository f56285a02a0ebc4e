"""Protocol definitions for ClickUp API client mixins.

Lets mixins reference base client methods without circular imports.
"""

from typing import Any, Protocol


class BaseClientProtocol(Protocol):
    """Protocol defining the interface that mixins can depend on."""

    async def make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated request to the ClickUp API."""
        ...

    def ensure_configured(self) -> None:
        """Raise when the ClickUp API token is not configured."""
        ...
