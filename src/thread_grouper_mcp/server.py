import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolResult, TextContent, Tool

from .tools_adapter import Result, compare_tool_call, group_tool_call

logger = logging.getLogger(__name__)

GROUP_TOOL = Tool(
    name="group_thread_dump",
    description=(
        "Parses a JVM thread dump text file and groups threads whose stack traces are identical "
        "once lock addresses are masked. Returns state counts and the groups passing the filters."
    ),
    inputSchema={
        "type": "object",
        "required": ["path"],
        "properties": {
            "path": {"type": "string", "description": "Path to thread dump text file"},
            "max_size": {"type": "integer", "minimum": 0, "description": "Only groups with at most this many threads"},
            "min_size": {"type": "integer", "minimum": 0, "description": "Only groups with at least this many threads"},
            "keywords": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Only groups whose stack contains one of these substrings",
            },
        },
        "additionalProperties": False,
    },
)

COMPARE_TOOL = Tool(
    name="compare_thread_dumps",
    description=(
        "Parses two JVM thread dump text files and compares thread state counts and stack group sizes."
    ),
    inputSchema={
        "type": "object",
        "required": ["path_a", "path_b"],
        "properties": {
            "path_a": {"type": "string", "description": "Path to first thread dump text file"},
            "path_b": {"type": "string", "description": "Path to second thread dump text file"},
            "diff_mode": {"type": "string", "enum": ["summary", "states", "full"], "default": "full"},
        },
        "additionalProperties": False,
    },
)


def _to_call_result(result: Result) -> CallToolResult:
    return CallToolResult(content=[TextContent(type="text", text=result.describe())], isError=not result.ok)


def build_server() -> Server:
    server = Server("thread-grouper-mcp")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        return [GROUP_TOOL, COMPARE_TOOL]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> CallToolResult:
        arguments = arguments or {}
        logger.info("Tool call %s", name)
        if name == "group_thread_dump":
            return _to_call_result(group_tool_call(
                arguments.get("path"),
                max_size=arguments.get("max_size"),
                min_size=arguments.get("min_size"),
                keywords=arguments.get("keywords"),
            ))
        elif name == "compare_thread_dumps":
            return _to_call_result(compare_tool_call(
                arguments.get("path_a"),
                arguments.get("path_b"),
                diff_mode=arguments.get("diff_mode", "full"),
            ))
        else:
            return CallToolResult(content=[TextContent(type="text", text=f"Unknown tool: {name}")], isError=True)

    return server


async def serve_async() -> None:
    server = build_server()
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def serve() -> None:
    asyncio.run(serve_async())
