"""
MCP handler tests. Handlers are awaited directly, without a transport.
"""

import asyncio
import json

from mcp import types
from mcp.server import Server

from semantic_memory.api.mcp_server import build_handlers, create_server


def _call_through_server(server, name, arguments):
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    return asyncio.run(handler(request)).root


def test_list_tools_handler(dispatcher):
    handle_list_tools, _ = build_handlers(dispatcher)
    tools = asyncio.run(handle_list_tools())

    names = [tool.name for tool in tools]
    assert names[0] == "save_memory"
    assert len(names) == 8
    save = tools[0]
    assert set(save.inputSchema["required"]) == {"id", "text"}


def test_call_tool_round_trip(dispatcher):
    _, handle_call_tool = build_handlers(dispatcher)

    result = asyncio.run(handle_call_tool("save_memory", {"id": "x", "text": "hello"}))
    assert result.isError is False
    assert len(result.content) == 1
    assert result.content[0].type == "text"
    assert json.loads(result.content[0].text)["success"] is True

    result = asyncio.run(handle_call_tool("get_memory", {"id": "x"}))
    assert json.loads(result.content[0].text)["memory"]["text"] == "hello"


def test_call_tool_without_arguments(dispatcher):
    _, handle_call_tool = build_handlers(dispatcher)
    result = asyncio.run(handle_call_tool("get_user_bio", None))
    assert json.loads(result.content[0].text)["bio"] is None


def test_call_tool_failures_are_json(dispatcher):
    _, handle_call_tool = build_handlers(dispatcher)
    result = asyncio.run(handle_call_tool("no_such_tool", {}))
    assert result.isError is True
    assert json.loads(result.content[0].text) == {"success": False, "error": "Unknown tool: no_such_tool"}


def test_not_found_is_not_a_protocol_error(dispatcher):
    _, handle_call_tool = build_handlers(dispatcher)
    result = asyncio.run(handle_call_tool("get_memory", {"id": "missing"}))
    assert result.isError is False
    assert json.loads(result.content[0].text)["success"] is False


def test_registered_handler_flags_faults(dispatcher):
    server = create_server(dispatcher)

    result = _call_through_server(server, "no_such_tool", {})
    assert isinstance(result, types.CallToolResult)
    assert result.isError is True
    assert "Unknown tool: no_such_tool" in result.content[0].text

    result = _call_through_server(server, "list_all_memories", {})
    assert result.isError is False
    assert json.loads(result.content[0].text)["count"] == 0


def test_create_server(dispatcher):
    server = create_server(dispatcher)
    assert isinstance(server, Server)
    assert server.name == "semantic-memory-server"
