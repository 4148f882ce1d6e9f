"""Expose every registered tool over MCP stdio.

Run with ``python -m trip_agent.mcp_servers.server``. Calls are routed
through the tool registry, so the same input and output contracts apply.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from trip_agent.agent.factory import build_tool_registry
from trip_agent.config import configure_logging, settings
from trip_agent.errors import ToolNotFound
from trip_agent.llm import create_chat_model
from trip_agent.mcp_servers.registry import ToolRegistry

logger = logging.getLogger("trip-mcp")

SERVER_NAME = "trip-planner-tools"


def list_registry_tools(registry: ToolRegistry) -> List[types.Tool]:
    return [
        types.Tool(
            name=str(getattr(tool.name, "value", tool.name)),
            description=tool.description,
            inputSchema=tool.input_model.model_json_schema(),
        )
        for tool in registry.tools()
    ]


async def call_registry_tool(
    registry: ToolRegistry,
    name: str,
    arguments: Optional[Dict[str, Any]],
) -> List[types.TextContent]:
    try:
        result = await registry.invoke(name, arguments or {})
    except ToolNotFound:
        raise ValueError(f"Unknown tool: {name}") from None
    return [types.TextContent(type="text", text=result.model_dump_json())]


def create_server(registry: ToolRegistry) -> Server:
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[types.Tool]:
        return list_registry_tools(registry)

    @server.call_tool()
    async def handle_call_tool(name: str, arguments: dict | None) -> list[types.TextContent]:
        logger.info(f"MCP call: {name}")
        return await call_registry_tool(registry, name, arguments)

    return server


async def main():
    # stdout carries the protocol, so logs go to the file only
    configure_logging(settings.log_level, settings.log_file, stream=False)

    registry = build_tool_registry(settings, create_chat_model(settings))
    server = create_server(registry)

    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            InitializationOptions(
                server_name=SERVER_NAME,
                server_version="1.0.0",
                capabilities=server.get_capabilities(
                    notification_options=NotificationOptions(),
                    experimental_capabilities={},
                ),
            ),
        )


if __name__ == "__main__":
    asyncio.run(main())
