"""Custom exceptions for ClickUp API operations.

This module defines the exception hierarchy for ClickUp API and gateway
errors. Every error carries the HTTP status code the gateway should answer
with and, for upstream failures, the upstream response body.
"""


class ClickUpAPIError(Exception):
    """Base exception for all ClickUp API errors.

    Messages must never contain the ClickUp API token.
    """

    def __init__(
        self, message: str, status_code: int | None = None, details: str | None = None
    ) -> None:
        """Initialize ClickUp API error.

        Args:
            message: Error message (must not contain the API token)
            status_code: HTTP status code if applicable
            details: Upstream response body, when there is one
        """
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    @classmethod
    def create_unexpected_error(cls, method: str, endpoint: str) -> "ClickUpAPIError":
        """Create an error for unexpected API errors with safe context.

        Args:
            method: HTTP method used
            endpoint: API endpoint called

        Returns:
            ClickUpAPIError with contextual message
        """
        safe_context = f"method={method}, endpoint={endpoint}, status_unknown"
        return cls(f"Unexpected API error ({safe_context})")

    @classmethod
    def create_parse_error(cls, endpoint: str, **context: str | int) -> "ClickUpAPIError":
        """Create an error for response parsing failures with safe context.

        Args:
            endpoint: API endpoint that failed
            **context: Additional safe context information

        Returns:
            ClickUpAPIError with contextual message
        """
        context_parts = [f"endpoint={endpoint}"]
        context_parts.extend(f"{key}={value}" for key, value in context.items())
        safe_context = ", ".join(context_parts)
        return cls(f"Failed to parse response ({safe_context})")


class ClickUpConfigurationError(ClickUpAPIError):
    """Raised when a required identifier or credential is not configured."""

    def __init__(self, message: str) -> None:
        """Initialize configuration error.

        Args:
            message: Fixed message naming the missing setting
        """
        super().__init__(message, status_code=500)

    @classmethod
    def missing_api_token(cls) -> "ClickUpConfigurationError":
        """Create an error for a missing ClickUp API token."""
        return cls("CLICKUP_API_TOKEN not set")

    @classmethod
    def missing_workspace_id(cls) -> "ClickUpConfigurationError":
        """Create an error for a missing workspace ID."""
        return cls("CLICKUP_WORKSPACE_ID not set")


class ClickUpBadRequestError(ClickUpAPIError):
    """Raised when caller input is invalid, or ClickUp rejects parameters (400)."""

    def __init__(
        self, message: str = "Bad request - invalid parameters", details: str | None = None
    ) -> None:
        """Initialize bad request error.

        Args:
            message: Error message describing the invalid parameters
            details: Upstream response body or validation detail
        """
        super().__init__(message, status_code=400, details=details)

    @classmethod
    def missing_task_id(cls) -> "ClickUpBadRequestError":
        """Create an error for an empty task_id parameter."""
        return cls("task_id is required")

    @classmethod
    def invalid_parameters(cls, details: str) -> "ClickUpBadRequestError":
        """Create an error for query parameters that failed validation.

        Args:
            details: Human readable validation summary
        """
        return cls("Invalid query parameters", details=details)


class ClickUpAuthenticationError(ClickUpAPIError):
    """Raised when ClickUp rejects the API token (401 Unauthorized)."""

    def __init__(self, message: str = "Authentication failed", details: str | None = None) -> None:
        """Initialize authentication error."""
        super().__init__(message, status_code=401, details=details)


class ClickUpNotFoundError(ClickUpAPIError):
    """Raised when a resource is not found (404 Not Found)."""

    def __init__(self, message: str = "Resource not found", details: str | None = None) -> None:
        """Initialize not found error."""
        super().__init__(message, status_code=404, details=details)


class ClickUpRateLimitError(ClickUpAPIError):
    """Raised when rate limit is exceeded (429 Too Many Requests)."""

    def __init__(self, message: str = "Rate limit exceeded", details: str | None = None) -> None:
        """Initialize rate limit error."""
        super().__init__(message, status_code=429, details=details)


class ClickUpServerError(ClickUpAPIError):
    """Raised when ClickUp returns 5xx errors."""

    def __init__(self, message: str, status_code: int = 500, details: str | None = None) -> None:
        """Initialize server error.

        Args:
            message: Error message
            status_code: HTTP status code (5xx)
            details: Upstream response body
        """
        super().__init__(message, status_code=status_code, details=details)


class ClickUpNetworkError(ClickUpAPIError):
    """Raised when network operations fail."""

    def __init__(self, message: str = "Network error occurred") -> None:
        """Initialize network error."""
        super().__init__(message, status_code=None)


class ClickUpTimeoutError(ClickUpAPIError):
    """Raised when requests to ClickUp time out."""

    def __init__(self, message: str = "Request timeout") -> None:
        """Initialize timeout error."""
        super().__init__(message, status_code=None)
