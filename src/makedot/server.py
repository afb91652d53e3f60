"""MCP server that exposes a Makefile task graph as tools."""

import json
import logging
import sys
from pathlib import Path

from mcp.server import Server
from mcp.types import TextContent, Tool

from makedot.core.emitter import render_dot
from makedot.core.graph import build_graph, find_tasks
from makedot.core.models import TaskGraph, WalkResult
from makedot.core.walker import MakefileWalker
from makedot.exceptions import TaskNotFoundError

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


TOOLS = [
    Tool(
        name="render_graph",
        description="Render the cross-file task graph of the Makefile as Graphviz DOT",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="list_tasks",
        description="List every parsed Makefile with its tasks, keyed by task ID",
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="describe_task",
        description="Show dependencies, commands and make invocations of every task with a given name",
        inputSchema={
            "type": "object",
            "properties": {
                "name": {
                    "type": "string",
                    "description": "Task name (e.g. 'build')",
                },
            },
            "required": ["name"],
        },
    ),
]


class MakedotMCPServer:
    """MCP server that exposes a Makefile task graph as tools."""

    def __init__(self, makefile_path: Path, walker: MakefileWalker | None = None):
        self.makefile_path = makefile_path
        self.walker = walker or MakefileWalker()
        self.result: WalkResult | None = None
        self.graph: TaskGraph | None = None
        self.server = Server("makedot")

        # Register handlers
        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            return await self._handle_list_tools()

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> list[TextContent]:
            return await self._handle_call_tool(name, arguments)

    async def initialize(self) -> None:
        """Initialize server by walking the Makefile and building its graph."""
        logger.info(f"Walking Makefile: {self.makefile_path}")
        self.result = self.walker.walk(self.makefile_path)
        self.graph = build_graph(self.result)
        logger.info(
            f"Found {len(self.graph.nodes)} tasks in {len(self.result.makefiles)} Makefiles "
            f"({len(self.graph.diagnostics)} diagnostics)"
        )

    async def _handle_list_tools(self) -> list[Tool]:
        """Return the graph tools."""
        if not self.graph:
            return []
        return list(TOOLS)

    async def _handle_call_tool(self, name: str, arguments: dict) -> list[TextContent]:
        """Run a graph tool."""
        if not self.result or not self.graph:
            return [TextContent(type="text", text="Error: server is not initialized")]

        try:
            if name == "render_graph":
                text = render_dot(self.graph)
            elif name == "list_tasks":
                text = self._list_tasks()
            elif name == "describe_task":
                text = self._describe_task(arguments.get("name", ""))
            else:
                available = ", ".join(tool.name for tool in TOOLS)
                raise ValueError(f"Unknown tool '{name}'. Available tools: {available}")
        except (TaskNotFoundError, ValueError) as e:
            # User-facing errors - return clean message
            logger.warning(f"Tool call rejected: {e}")
            return [TextContent(type="text", text=f"Error: {str(e)}")]

        return [TextContent(type="text", text=text)]

    def _list_tasks(self) -> str:
        assert self.result is not None
        makefiles = [
            {
                "file": str(makefile.file),
                "tasks": {task_id: task.to_dict() for task_id, task in makefile.tasks.items()},
            }
            for makefile in self.result.makefiles
        ]
        return json.dumps(makefiles, indent=2)

    def _describe_task(self, task_name: str) -> str:
        assert self.result is not None
        if not task_name:
            raise ValueError("Missing required argument 'name'")

        described = []
        for makefile, task_id in find_tasks(self.result, task_name):
            invocations = [
                {"makefile": str(external.path), "tasks": list(external.target_names)}
                for external in self.result.externals
                if external.source_id == task_id
            ]
            described.append(
                {"id": task_id, "file": str(makefile.file), **makefile.tasks[task_id].to_dict(), "invokes": invocations}
            )
        return json.dumps(described, indent=2)

    async def run(self) -> None:
        """Run the MCP server with stdio transport."""
        from mcp.server.stdio import stdio_server

        await self.initialize()

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
