"""Pytest fixtures and configuration for the test suite."""

import pytest
from fastmcp import FastMCP
from pydantic import HttpUrl
from pytest_mock import AsyncMockType, MockerFixture

from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.config import ServerConfig
from clickup_mcp.tools.task_filters import ListCatalog
from clickup_mcp.tools.tasks import TaskTools
from clickup_mcp.tools.tasks_list import RetrievalSettings, TaskRetriever
from tests.factories import ACTIVE_LIST, INVOICING_LIST_ID, WORKSPACE_ID


@pytest.fixture
def default_config() -> ServerConfig:
    """Provide a default ServerConfig instance for testing.

    Returns:
        ServerConfig: A configured ServerConfig instance with test values.
    """
    return ServerConfig(
        clickup_api_token="pk_test_token_123",
        clickup_base_url=HttpUrl("https://api.clickup.com/api/v2/"),
        clickup_workspace_id=WORKSPACE_ID,
        invoicing_list_id=INVOICING_LIST_ID,
        port=8080,
        log_level="INFO",
        config_file=None,
    )


@pytest.fixture
def mcp() -> FastMCP:
    """Provide a FastMCP instance for testing."""
    return FastMCP("test-server")


@pytest.fixture
def client(default_config: ServerConfig) -> ClickUpClient:
    """Provide a ClickUpClient instance for testing."""
    return ClickUpClient(default_config)


@pytest.fixture
def settings() -> RetrievalSettings:
    """Provide retrieval settings with a one-list active catalog and an invoicing list."""
    return RetrievalSettings(
        active_lists=ListCatalog([ACTIVE_LIST]),
        workspace_id=WORKSPACE_ID,
        invoicing_list_id=INVOICING_LIST_ID,
        default_limit=40,
        invoicing_page_size=100,
    )


@pytest.fixture
def retriever(client: ClickUpClient, settings: RetrievalSettings) -> TaskRetriever:
    """Provide a TaskRetriever bound to the test client."""
    return TaskRetriever(client, settings)


@pytest.fixture
def task_tools(mcp: FastMCP, client: ClickUpClient, settings: RetrievalSettings) -> TaskTools:
    """Provide a TaskTools instance for testing."""
    return TaskTools(mcp, client, settings)


@pytest.fixture
def async_ctx(mocker: MockerFixture) -> AsyncMockType:
    """Provide an async context mock for testing.

    Returns:
        AsyncMock: An async context mock with a test session ID.
    """
    mock_ctx = mocker.AsyncMock()
    mock_ctx.session_id = "test-session-123"
    return mock_ctx
