"""Base client for ClickUp API with HTTP plumbing and authentication.

This module provides the BaseClient class containing the HTTP infrastructure,
authentication and error mapping shared by the feature-specific mixins.
Requests are never retried: a failed call surfaces immediately as a
ClickUpAPIError carrying the upstream status code and body.
"""

import logging
import types
from typing import Any, NoReturn

import httpx

from clickup_mcp.api.exceptions import (
    ClickUpAPIError,
    ClickUpAuthenticationError,
    ClickUpBadRequestError,
    ClickUpConfigurationError,
    ClickUpNetworkError,
    ClickUpNotFoundError,
    ClickUpRateLimitError,
    ClickUpServerError,
    ClickUpTimeoutError,
)
from clickup_mcp.config import ServerConfig

# HTTP status code constants
_HTTP_NO_CONTENT = 204
_HTTP_BAD_REQUEST = 400
_HTTP_UNAUTHORIZED = 401
_HTTP_NOT_FOUND = 404
_HTTP_TOO_MANY_REQUESTS = 429
_HTTP_INTERNAL_SERVER_ERROR = 500
_HTTP_MAX_SERVER_ERROR = 600

# Configure logger to write to stderr
logger = logging.getLogger(__name__)


class BaseClient:
    """Base client providing HTTP plumbing and authentication for ClickUp API.

    This class contains connection management, authentication and error
    mapping, and is composed with feature-specific mixins.
    """

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the base ClickUp API client.

        Args:
            config: Server configuration containing API token and base URL
        """
        self._config = config
        self._base_url = str(config.clickup_base_url).rstrip("/")
        self._api_token = config.clickup_api_token
        self._http_client: httpx.AsyncClient | None = None

    def __str__(self) -> str:
        """Return string representation without exposing the API token."""
        return f"BaseClient(base_url={self._base_url}, token=***redacted***)"

    def __repr__(self) -> str:
        """Return repr without exposing the API token."""
        return f"BaseClient(base_url='{self._base_url}', token='***redacted***')"

    async def __aenter__(self) -> "BaseClient":
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: types.TracebackType | None,
    ) -> None:
        """Async context manager exit with cleanup."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the shared HTTP connection pool.

        Called once when the server shuts down, never per request; a later
        request lazily opens a new pool.
        """
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def ensure_configured(self) -> None:
        """Fail fast when no API token is configured.

        Raises:
            ClickUpConfigurationError: If the ClickUp API token is not set
        """
        if not self._api_token:
            raise ClickUpConfigurationError.missing_api_token()

    def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client with proper configuration.

        Returns:
            httpx.AsyncClient: Configured async HTTP client
        """
        if self._http_client is None:
            timeout = httpx.Timeout(
                connect=self._config.timeout_connect,
                read=self._config.timeout_read,
                write=10.0,
                pool=10.0,
            )

            limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
            )

            headers = {"User-Agent": self._config.http_user_agent}

            self._http_client = httpx.AsyncClient(
                timeout=timeout,
                limits=limits,
                follow_redirects=True,
                headers=headers,
            )

        return self._http_client

    def _get_auth_headers(self) -> dict[str, str]:
        """Get authentication headers.

        ClickUp personal tokens are sent as-is, without a ``Bearer`` prefix.

        Returns:
            Dict[str, str]: Headers including Authorization
        """
        self.ensure_configured()
        return {"Authorization": str(self._api_token)}

    def _get_redacted_headers(self) -> dict[str, str]:
        """Get headers with redacted API token for logging.

        Returns:
            Dict[str, str]: Headers with redacted authorization token
        """
        return {"Authorization": "***redacted***"}

    def _handle_http_error(self, error: httpx.HTTPStatusError) -> NoReturn:
        """Handle HTTP status errors and raise appropriate exceptions.

        The upstream body is attached as ``details`` so callers can forward it.

        Args:
            error: HTTP status error from httpx

        Raises:
            ClickUpBadRequestError: For 400 Bad Request
            ClickUpAuthenticationError: For 401 Unauthorized
            ClickUpNotFoundError: For 404 Not Found
            ClickUpRateLimitError: For 429 Too Many Requests
            ClickUpServerError: For 5xx server errors
            ClickUpAPIError: For other HTTP errors
        """
        status_code = error.response.status_code
        details = error.response.text

        if status_code == _HTTP_BAD_REQUEST:
            logger.error("Bad request to ClickUp API - invalid parameters")
            raise ClickUpBadRequestError("ClickUp error", details=details) from error
        if status_code == _HTTP_UNAUTHORIZED:
            logger.error("Authentication failed with ClickUp API")
            raise ClickUpAuthenticationError("ClickUp error", details=details) from error
        if status_code == _HTTP_NOT_FOUND:
            logger.error("Resource not found: %s", error.request.url)
            raise ClickUpNotFoundError("ClickUp error", details=details) from error
        if status_code == _HTTP_TOO_MANY_REQUESTS:
            logger.error("Rate limit exceeded for ClickUp API")
            raise ClickUpRateLimitError("ClickUp error", details=details) from error
        if _HTTP_INTERNAL_SERVER_ERROR <= status_code < _HTTP_MAX_SERVER_ERROR:
            logger.error("ClickUp API server error: %s", status_code)
            raise ClickUpServerError("ClickUp error", status_code, details=details) from error
        logger.error("ClickUp API error: %s", status_code)
        raise ClickUpAPIError("ClickUp error", status_code, details=details) from error

    async def make_request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an authenticated, body-less request to the ClickUp API.

        Args:
            method: HTTP method (the gateway only reads, so GET)
            endpoint: API endpoint (without base URL)
            params: Query parameters

        Returns:
            Dict[str, Any]: Parsed JSON response

        Raises:
            ClickUpConfigurationError: API token not configured
            ClickUpBadRequestError: Invalid request parameters
            ClickUpAuthenticationError: Authentication failed
            ClickUpNotFoundError: Resource not found
            ClickUpRateLimitError: Rate limit exceeded
            ClickUpServerError: Server error
            ClickUpNetworkError: Network connectivity error
            ClickUpTimeoutError: Request timeout
            ClickUpAPIError: Other API errors
        """
        method_upper = method.upper()
        url = f"{self._base_url}/{endpoint.lstrip('/')}"
        headers = self._get_auth_headers()

        try:
            http_client = self._get_http_client()

            logger.debug(
                "Making %s request to %s with params %s and headers: %s",
                method_upper,
                url,
                params,
                self._get_redacted_headers(),
            )

            response = await http_client.request(
                method=method_upper,
                url=url,
                headers=headers,
                params=params,
            )

            response.raise_for_status()

        except httpx.HTTPStatusError as error:
            self._handle_http_error(error)
        except httpx.TimeoutException as error:
            logger.exception("Request timeout")
            raise ClickUpTimeoutError from error
        except httpx.NetworkError as error:
            logger.exception("Network error")
            raise ClickUpNetworkError from error
        except Exception as error:
            logger.exception("Unexpected error during API request")
            raise ClickUpAPIError.create_unexpected_error(method_upper, endpoint) from error

        if response.status_code == _HTTP_NO_CONTENT:
            logger.debug("Successful API response: %s (No Content)", response.status_code)
            return {}

        try:
            result = response.json()
        except ValueError as error:
            logger.exception("ClickUp API returned a non-JSON body")
            raise ClickUpAPIError.create_parse_error(
                endpoint, status=response.status_code
            ) from error

        logger.debug("Successful API response: %s", response.status_code)
        return result

    async def test_connectivity(self) -> bool:
        """Test connectivity to the ClickUp API.

        Calls the authorized-user endpoint to verify that the token is valid and
        the API is reachable.

        Returns:
            bool: True if connectivity test succeeds, False otherwise
        """
        try:
            result = await self.make_request("GET", "user")
        except ClickUpAPIError as e:
            logger.warning("ClickUp API connectivity test failed: %s", e)
            return False
        except Exception:
            logger.exception("ClickUp API connectivity test failed with unexpected error")
            return False
        else:
            if isinstance(result.get("user"), dict):
                logger.info("ClickUp API connectivity test successful")
                return True
            logger.warning("ClickUp API connectivity test failed: unexpected response")
            return False
