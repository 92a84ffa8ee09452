"""Library Lending MCP Server

Exposes the lending core to MCP clients alongside the REST API. Both surfaces
share the same repositories and the same database.

Features exposed:
- Resources: catalog with loan status, borrowed/available views, user history
- Tools: borrow_book and return_book

Transport is stdio by default; streamable HTTP is selected through
``LIBRARY_LENDING_TRANSPORT``.
"""

import logging
import signal
import sys
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .database.session import get_db_manager
from .observability import initialize_observability
from .observability.middleware import MCPInstrumentationMiddleware
from .resources import all_resources
from .tools import all_tools

# stderr for logs, stdout is reserved for the stdio transport
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stderr)],
)

logger = logging.getLogger(__name__)

config = get_config()

mcp = FastMCP(
    name=config.server_name,
    version=config.server_version,
    instructions=(
        "Library Lending MCP Server - a small lending library. Use resources to "
        "browse the catalog and see which books are out, and tools to borrow and "
        "return books. A book can only be on one loan at a time."
    ),
)

mcp.add_middleware(MCPInstrumentationMiddleware())

for resource in all_resources:
    uri = resource.get("uri_template", resource.get("uri"))
    if not uri:
        logger.error("Resource missing URI: %s", resource)
        continue

    logger.debug("Registering resource: %s with URI: %s", resource["name"], uri)
    mcp.resource(
        uri=uri,
        name=resource["name"],
        description=resource["description"],
        mime_type=resource["mime_type"],
    )(resource["handler"])

logger.info("Registered %d resources", len(all_resources))

for tool in all_tools:
    logger.debug("Registering tool: %s", tool["name"])
    mcp.tool(
        name=tool["name"],
        description=tool["description"],
    )(tool["handler"])

logger.info("Registered %d tools", len(all_tools))


def _configure_log_level() -> None:
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug mode enabled - verbose protocol logging active")
    else:
        logging.getLogger().setLevel(getattr(logging, config.log_level))
        logging.getLogger("fastmcp").setLevel(logging.WARNING)


def _install_signal_handlers() -> None:
    def signal_handler(signum: int, _frame: Any) -> None:
        logger.info("Received signal %s, initiating shutdown...", signum)
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)


def run_stdio_server() -> None:
    """Run the MCP server on stdin/stdout."""
    logger.info("Starting %s v%s on stdio transport", config.server_name, config.server_version)
    _configure_log_level()
    _install_signal_handlers()

    try:
        logger.info("MCP Server ready and waiting for connections...")
        mcp.run(transport="stdio")
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def run_http_server() -> None:
    """Run the MCP server on the streamable HTTP transport."""
    logger.info(
        "Starting %s v%s on http://%s:%d",
        config.server_name,
        config.server_version,
        config.http_host,
        config.http_port,
    )
    _configure_log_level()

    try:
        mcp.run(transport="streamable-http", host=config.http_host, port=config.http_port)
    except Exception:
        logger.exception("Fatal error in MCP server")
        sys.exit(1)


def main() -> None:
    """Entry point for ``library-lending-mcp``."""
    try:
        logger.info("=" * 60)
        logger.info("Library Lending MCP Server")
        logger.info("Version: %s", config.server_version)
        logger.info("Transport: %s", config.transport)
        logger.info("Debug Mode: %s", config.debug)
        logger.info("=" * 60)

        initialize_observability(config)
        get_db_manager().init_database()

        if config.transport == "stdio":
            run_stdio_server()
        else:
            run_http_server()

    except KeyboardInterrupt:
        logger.info("Server stopped by user")
    except Exception:
        logger.exception("Failed to start MCP server")
        sys.exit(1)
    finally:
        get_db_manager().close()


if __name__ == "__main__":
    main()
