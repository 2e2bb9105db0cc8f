"""
MCP server over stdio. Tool calls are forwarded to the ToolDispatcher; the
JSON response travels back as a single text content block.
"""

import asyncio
import json
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from mcp.server import Server
from mcp.server.lowlevel import NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from .tools import TOOL_SPECS, ToolDispatcher
from ..core.config import SERVER_NAME, VERSION
from ..util.logging import logger

ListToolsHandler = Callable[[], Awaitable[List[Tool]]]
CallToolHandler = Callable[[str, Optional[Dict[str, Any]]], Awaitable[CallToolResult]]


def render_response(response: Dict[str, Any]) -> str:
    return json.dumps(response, indent=2, ensure_ascii=False)


def build_handlers(dispatcher: ToolDispatcher) -> Tuple[ListToolsHandler, CallToolHandler]:
    """Create the list_tools/call_tool coroutines bound to a dispatcher."""

    async def handle_list_tools() -> List[Tool]:
        return [
            Tool(name=spec.name, description=spec.description, inputSchema=spec.input_schema())
            for spec in TOOL_SPECS
        ]

    async def handle_call_tool(name: str, arguments: Optional[Dict[str, Any]]) -> CallToolResult:
        logger.debug(f"Tool call: {name}")
        # Store calls block on sqlite and model inference; keep them off the event loop
        response = await asyncio.to_thread(dispatcher.dispatch, name, arguments or {})
        # Faults carry "error"; not-found outcomes carry "message" and are not protocol errors
        return CallToolResult(
            content=[TextContent(type="text", text=render_response(response))],
            isError="error" in response,
        )

    return handle_list_tools, handle_call_tool


def create_server(dispatcher: ToolDispatcher) -> Server:
    server = Server(SERVER_NAME)
    handle_list_tools, handle_call_tool = build_handlers(dispatcher)
    server.list_tools()(handle_list_tools)
    server.call_tool()(handle_call_tool)
    return server


async def run_stdio(dispatcher: ToolDispatcher) -> None:
    """Serve the memory tools on stdin/stdout until the client disconnects."""
    server = create_server(dispatcher)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("MCP Semantic Memory Server (SQLite) running on stdio")
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version=VERSION,
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )
