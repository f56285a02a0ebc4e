"""Configuration module for ClickUp MCP server.

This module provides the ServerConfig Pydantic model for managing server
configuration from files, environment variables, command-line arguments,
and defaults.
"""

from importlib.metadata import version
from typing import Any, Literal

from pydantic import BaseModel, Field, HttpUrl, field_validator

DEFAULT_ACTIVE_LIST_NAMES: tuple[str, ...] = (
    "Enquiry / Quotation",
    "Confirmed Order",
    "Design - Work in progress",
    "Production - Work in progress",
    "Fitting - Work in progress",
)

_REDACTED = "***redacted***"


class ServerConfig(BaseModel):
    """Server configuration model with validation and default values.

    Holds the ClickUp credentials and identifiers, the retrieval defaults used
    by the task listing tool, and the transport/logging settings of the server.
    """

    clickup_api_token: str | None = Field(
        default=None,
        description="ClickUp personal API token (sent verbatim in the Authorization header)",
    )

    clickup_base_url: HttpUrl = Field(
        default=HttpUrl("https://api.clickup.com/api/v2/"),
        description="Base URL for ClickUp API endpoints",
    )

    clickup_workspace_id: str | None = Field(
        default=None,
        description="ClickUp workspace (team) ID used for workspace-wide task searches",
    )

    invoicing_list_id: str | None = Field(
        default=None,
        description="ID of the dedicated ClickUp list holding invoicing/completed work",
    )

    active_list_names: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ACTIVE_LIST_NAMES),
        min_length=1,
        description="Names of the lists that make up the active pipeline (case-insensitive)",
    )

    default_limit: int = Field(
        default=40,
        ge=1,
        le=1000,
        description="Number of items returned by clickup_list_tasks when no limit is given",
    )

    invoicing_page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size requested from ClickUp when fetching the invoicing list",
    )

    mcp_bearer: str | None = Field(
        default=None,
        description="Bearer token required from callers of the HTTP transport (open when unset)",
    )

    transport: Literal["stdio", "http"] = Field(
        default="stdio",
        description="MCP transport to serve on",
    )

    host: str = Field(
        default="0.0.0.0",  # noqa: S104 - container deployments bind all interfaces
        description="Host interface for the HTTP transport",
    )

    port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Port number for the HTTP transport",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level for the application",
    )

    config_file: str | None = Field(
        default=None,
        description="Path to configuration file",
    )

    test_connectivity_on_startup: bool = Field(
        default=False,
        description="Test ClickUp API connectivity during server startup",
    )

    http_user_agent: str = Field(
        default_factory=lambda: f"clickup-mcp/{version('clickup-mcp')}",
        description="HTTP client User-Agent header",
    )

    timeout_connect: float = Field(
        default=5.0,
        ge=1.0,
        le=30.0,
        description="HTTP connection timeout in seconds",
    )

    timeout_read: float = Field(
        default=30.0,
        ge=5.0,
        le=120.0,
        description="HTTP read timeout in seconds",
    )

    @field_validator("clickup_base_url")
    @classmethod
    def validate_https_url(cls, v: HttpUrl) -> HttpUrl:
        """Validate that the base URL uses HTTPS protocol.

        Args:
            v: The URL value to validate.

        Returns:
            HttpUrl: The validated HTTPS URL.

        Raises:
            ValueError: If the URL does not use HTTPS protocol.
        """
        if v.scheme != "https":
            msg = "URL must use HTTPS"
            raise ValueError(msg)
        return v

    @field_validator(
        "clickup_api_token",
        "clickup_workspace_id",
        "invoicing_list_id",
        "mcp_bearer",
        mode="before",
    )
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        """Treat empty strings (e.g. ``FOO=`` in the environment) as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_redacted_dict(self) -> dict[str, Any]:
        """Return a dictionary representation with sensitive data redacted.

        Returns:
            dict[str, Any]: Configuration dictionary with secrets redacted.
        """
        config_dict = self.model_dump()
        if config_dict["clickup_api_token"] is not None:
            config_dict["clickup_api_token"] = _REDACTED
        if config_dict["mcp_bearer"] is not None:
            config_dict["mcp_bearer"] = _REDACTED
        # Convert HttpUrl to string for serialization
        config_dict["clickup_base_url"] = str(config_dict["clickup_base_url"])
        return config_dict
