"""Tests for the MCP server wiring.

An in-memory FastMCP client connects to the server object directly, so these
check what a real client would discover without starting a transport.
"""

import pytest
from fastmcp import Client


@pytest.fixture
def server_module(global_db_manager):
    from library_lending import server

    return server


class TestServerRegistration:
    async def test_tools_registered(self, server_module):
        async with Client(server_module.mcp) as client:
            tools = await client.list_tools()

        assert {tool.name for tool in tools} == {"borrow_book", "return_book"}

    async def test_static_resources_registered(self, server_module):
        async with Client(server_module.mcp) as client:
            resources = await client.list_resources()

        assert {str(r.uri) for r in resources} == {
            "library://books/list",
            "library://books/borrowed",
            "library://books/available",
        }

    async def test_user_history_template_registered(self, server_module):
        async with Client(server_module.mcp) as client:
            templates = await client.list_resource_templates()

        assert [t.uriTemplate for t in templates] == ["library://users/{user_id}/borrowed"]

    def test_server_name(self, server_module):
        assert server_module.mcp.name == "library-lending"
