"""Main application entry point for ClickUp MCP server.

This module contains the CoreServer class which serves as the main application runner
for the FastMCP server implementation.

Exit Codes:
    0: Normal successful termination
    1: Configuration-related failures (TOML parse errors, validation failures,
       missing required files, unknown configuration keys, or unhandled exceptions)
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
import tomllib
from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastmcp import FastMCP
from starlette.middleware import Middleware

from clickup_mcp import __version__
from clickup_mcp.api.client import ClickUpClient
from clickup_mcp.config import ServerConfig
from clickup_mcp.http_routes import BearerAuthMiddleware, register_http_routes
from clickup_mcp.tools.tasks import TaskTools
from clickup_mcp.tools.tasks_list import RetrievalSettings

# Environment variables understood by the server and the config field each sets
ENV_VARIABLES: dict[str, str] = {
    "CLICKUP_API_TOKEN": "clickup_api_token",
    "CLICKUP_WORKSPACE_ID": "clickup_workspace_id",
    "CLICKUP_INVOICING_LIST_ID": "invoicing_list_id",
    "MCP_BEARER": "mcp_bearer",
    "PORT": "port",
}


class CoreServer:
    """Main application runner responsible for initializing and managing the FastMCP server.

    Handles FastMCP initialization, logging configuration to stderr, tool and
    HTTP route registration, and server startup on the configured transport.
    """

    def __init__(self, config: ServerConfig) -> None:
        """Initialize the CoreServer instance.

        Args:
            config: Server configuration instance containing all settings.
        """
        self.config = config
        self._setup_logging()
        self.app = self._create_fastmcp_instance()
        self._clickup_client: ClickUpClient | None = None
        self.task_tools = self._register_tools()
        self._shutdown_requested = False
        self._sigint_count = 0
        self._setup_signal_handlers()

    def _setup_logging(self) -> None:
        """Configure logging to direct all output to stderr.

        Keeps stdout clean for MCP JSON-RPC communication over stdio.
        """
        log_level = getattr(logging, self.config.log_level)
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            stream=sys.stderr,
        )

    def _create_fastmcp_instance(self) -> FastMCP:
        """Create and configure the FastMCP application instance.

        Returns:
            FastMCP: Configured FastMCP instance.
        """
        return FastMCP(
            name="clickup-mcp",
            version=__version__,
            lifespan=self._client_lifespan,
        )

    @asynccontextmanager
    async def _client_lifespan(self, _server: FastMCP) -> AsyncIterator[dict[str, Any]]:
        """Keep the ClickUp connection pool open for the server's lifetime."""
        try:
            yield {}
        finally:
            if self._clickup_client is not None:
                await self._clickup_client.aclose()
                logging.getLogger(__name__).info("Closed ClickUp HTTP client")

    def _register_tools(self) -> TaskTools:
        """Register all tools and HTTP routes with the FastMCP instance."""
        task_tools = TaskTools(
            self.app,
            self.get_clickup_client(),
            RetrievalSettings.from_config(self.config),
        )
        register_http_routes(self.app, task_tools)
        return task_tools

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""

        def signal_handler(signum: int, _: object | None) -> None:
            """Handle shutdown signals by forcing immediate exit."""
            logger = logging.getLogger(__name__)
            signal_name = "SIGINT" if signum == signal.SIGINT else f"Signal {signum}"

            if signum == signal.SIGINT:
                self._sigint_count += 1
                if self._sigint_count == 1:
                    logger.info("Received %s, initiating graceful shutdown", signal_name)
                    self._shutdown_requested = True
                    os._exit(0)
                else:
                    logger.warning("Second SIGINT received; forcing immediate exit")
                    os._exit(1)
            else:
                logger.info("Received %s, initiating graceful shutdown", signal_name)
                self._shutdown_requested = True
                os._exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def get_config(self) -> ServerConfig:
        """Get the server configuration instance for dependency injection."""
        return self.config

    def get_clickup_client(self) -> ClickUpClient:
        """Get or create the ClickUp API client instance for dependency injection.

        Returns:
            ClickUpClient: The ClickUp API client instance.
        """
        if self._clickup_client is None:
            self._clickup_client = ClickUpClient(self.config)
        return self._clickup_client

    def get_http_middleware(self) -> list[Middleware]:
        """Return the ASGI middleware for the HTTP transport.

        The bearer gate is only installed when ``mcp_bearer`` is configured;
        without it the server is open.
        """
        if not self.config.mcp_bearer:
            return []
        return [Middleware(BearerAuthMiddleware, bearer_token=self.config.mcp_bearer)]

    async def _test_connectivity_if_enabled(self) -> None:
        """Test ClickUp API connectivity if enabled in configuration."""
        if not self.config.test_connectivity_on_startup:
            return

        logger = logging.getLogger(__name__)
        logger.info("Testing ClickUp API connectivity...")

        try:
            clickup_client = self.get_clickup_client()
            async with clickup_client:
                success = await clickup_client.test_connectivity()
                if success:
                    logger.info("ClickUp API connectivity test successful")
                else:
                    logger.warning("ClickUp API connectivity test failed")
        except Exception:
            logger.exception("ClickUp API connectivity test failed with exception")

    def run(self) -> None:
        """Run the MCP server on the configured transport."""
        logger = logging.getLogger(__name__)

        if self.config.test_connectivity_on_startup:
            try:
                asyncio.run(self._test_connectivity_if_enabled())
            except Exception:
                logger.exception("Connectivity test failed during startup")
                # Don't exit - allow server to continue running

        try:
            if self.config.transport == "http":
                logger.info(
                    "Starting ClickUp MCP server with HTTP transport on %s:%d",
                    self.config.host,
                    self.config.port,
                )
                self.app.run(
                    transport="http",
                    host=self.config.host,
                    port=self.config.port,
                    middleware=self.get_http_middleware(),
                )
            else:
                logger.info("Starting ClickUp MCP server with stdio transport")
                self.app.run(transport="stdio")
        except KeyboardInterrupt:
            logger.info("Server shutdown requested via KeyboardInterrupt")
            raise
        except Exception:
            logger.exception("Unhandled exception in server run method")
            raise


def _get_known_config_fields() -> set[str]:
    """Get the set of known configuration field names.

    Returns:
        set[str]: Set of valid configuration field names for TOML validation.
    """
    return set(ServerConfig.model_fields)


def _load_config_from_file(config_file: str) -> dict[str, Any]:
    """Load configuration from TOML file with validation.

    Args:
        config_file: Path to the configuration file.

    Returns:
        dict[str, Any]: Configuration data loaded from file.

    Raises:
        SystemExit: On file parsing errors or unknown configuration keys.
    """
    config_data: dict[str, Any] = {}
    logger = logging.getLogger(__name__)
    config_path = Path(config_file)

    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                file_config = tomllib.load(f)

            known_fields = _get_known_config_fields()
            unknown_keys = set(file_config.keys()) - known_fields
            if unknown_keys:
                logger.error(
                    "Unknown configuration keys in %s: %s",
                    config_path,
                    ", ".join(sorted(unknown_keys)),
                )
                sys.exit(1)

            config_data.update(file_config)
            logger.info("Loaded configuration from %s", config_path)
        except tomllib.TOMLDecodeError:
            logger.exception("Failed to parse TOML configuration file %s", config_path)
            sys.exit(1)
        except OSError:
            logger.exception("Failed to read configuration file %s", config_path)
            sys.exit(1)

    return config_data


def _apply_env_overrides(config_data: dict[str, Any], environ: Mapping[str, str]) -> None:
    """Apply environment variable overrides to configuration data.

    Args:
        config_data: Configuration data dictionary to modify.
        environ: Environment mapping (usually ``os.environ``).
    """
    for env_name, field_name in ENV_VARIABLES.items():
        value = environ.get(env_name)
        if value is not None and value != "":
            config_data[field_name] = value


def _apply_cli_overrides(config_data: dict[str, Any], args: argparse.Namespace) -> None:
    """Apply CLI argument overrides to configuration data.

    Args:
        config_data: Configuration data dictionary to modify.
        args: Parsed command-line arguments.
    """
    overrides = {
        "transport": "transport",
        "host": "host",
        "port": "port",
        "log_level": "log_level",
        "base_url": "clickup_base_url",
        "token": "clickup_api_token",
        "workspace_id": "clickup_workspace_id",
        "invoicing_list_id": "invoicing_list_id",
    }
    for arg_name, field_name in overrides.items():
        value = getattr(args, arg_name, None)
        if value is not None:
            config_data[field_name] = value


def _create_validated_config(config_data: dict[str, Any]) -> ServerConfig:
    """Create and validate ServerConfig from configuration data.

    Args:
        config_data: Configuration data dictionary.

    Returns:
        ServerConfig: Validated configuration instance.

    Raises:
        SystemExit: On configuration validation errors.
    """
    logger = logging.getLogger(__name__)

    try:
        config = ServerConfig(**config_data)
    except Exception:
        logger.exception("Configuration validation failed")
        sys.exit(1)
    else:
        # Log effective configuration with secrets redacted
        logger.info("Effective configuration: %s", config.to_redacted_dict())
        return config


def load_configuration(
    args: argparse.Namespace, environ: Mapping[str, str] | None = None
) -> ServerConfig:
    """Load configuration with precedence CLI > environment > file > defaults.

    Args:
        args: Parsed command-line arguments.
        environ: Environment mapping; defaults to ``os.environ``.

    Returns:
        ServerConfig: Loaded and validated configuration.

    Raises:
        SystemExit: On configuration validation errors or file parsing errors.
    """
    logger = logging.getLogger(__name__)

    config_file = args.config_file or "./config.toml"

    # Check if explicitly specified config file exists
    if args.config_file and not Path(config_file).exists():
        logger.error("Configuration file not found: %s", config_file)
        sys.exit(1)

    config_data = _load_config_from_file(config_file)
    _apply_env_overrides(config_data, os.environ if environ is None else environ)
    _apply_cli_overrides(config_data, args)

    config_data["config_file"] = config_file

    return _create_validated_config(config_data)


def parse_cli_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for server configuration.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="ClickUp MCP Server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config-file",
        type=str,
        help="Path to configuration file (default: ./config.toml)",
    )

    parser.add_argument(
        "--transport",
        type=str,
        choices=["stdio", "http"],
        help="MCP transport (default: stdio)",
    )

    parser.add_argument(
        "--host",
        type=str,
        help="Host interface for the HTTP transport",
    )

    parser.add_argument(
        "--port",
        type=int,
        help="Port number for the HTTP transport (1-65535)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )

    parser.add_argument(
        "--base-url",
        type=str,
        help="Override ClickUp API base URL (e.g., https://api.clickup.com/api/v2/)",
    )

    parser.add_argument(
        "--token",
        type=str,
        help="Override ClickUp API token",
    )

    parser.add_argument(
        "--workspace-id",
        type=str,
        help="Override ClickUp workspace (team) ID",
    )

    parser.add_argument(
        "--invoicing-list-id",
        type=str,
        help="Override ID of the invoicing list",
    )

    return parser.parse_args(argv)


def main() -> None:
    """Main entry point for the ClickUp MCP server.

    All logging is directed to stderr to keep stdout clean for stdio transport.
    """
    logger = logging.getLogger(__name__)

    try:
        args = parse_cli_args()
        config = load_configuration(args)

        server = CoreServer(config)
        server.run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested via KeyboardInterrupt")
    except Exception:
        logger.exception("Unhandled exception in server")
        sys.exit(1)
    finally:
        logger.info("Server shutdown complete")


if __name__ == "__main__":
    main()
