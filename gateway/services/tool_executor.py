"""Tool execution with per-tool error containment."""

import asyncio
import json
import time
from collections.abc import Iterable, Mapping
from typing import Any

import structlog
from langchain_core.tools import BaseTool

from gateway.providers.base import ToolCall, ToolResult
from gateway.tools.context import ToolContext
from gateway.tools.registry import TOOLS

logger = structlog.get_logger()


def error_result(message: str) -> str:
    """JSON error envelope handed back to the model as the tool's output."""
    return json.dumps({"error": message}, ensure_ascii=False)


class ToolExecutor:
    """Runs catalogue tools for one chat turn.

    ``execute`` never raises: a failing tool yields ``{"error": ...}`` so the
    model can recover or apologize instead of the whole turn failing.
    """

    def __init__(
        self,
        context: ToolContext,
        tools: Mapping[str, BaseTool] = TOOLS,
    ) -> None:
        self._context = context
        self._tools = tools

    async def execute(self, name: str, arguments: dict[str, Any]) -> str:
        """Invoke one tool and return its JSON string result."""
        tool = self._tools.get(name)
        if tool is None:
            return error_result(f"Unknown tool: {name}")

        started = time.perf_counter()
        logger.info("Tool started", tool=name, arguments=sorted(arguments))
        try:
            result = await tool.ainvoke(arguments, config=self._context.as_config())
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Tool failed",
                tool=name,
                error=str(e) or type(e).__name__,
                duration_ms=round((time.perf_counter() - started) * 1000),
            )
            return error_result(str(e) or type(e).__name__)

        logger.info(
            "Tool finished",
            tool=name,
            duration_ms=round((time.perf_counter() - started) * 1000),
        )
        return result if isinstance(result, str) else json.dumps(result, default=str)

    async def execute_call(self, call: ToolCall) -> ToolResult:
        """Decode a model tool call and run it."""
        try:
            arguments = call.parsed_arguments()
        except ValueError as e:
            content = error_result(f"Invalid arguments for {call.name}: {e}")
        else:
            content = await self.execute(call.name, arguments)
        return ToolResult(tool_call_id=call.id, name=call.name, content=content)

    async def execute_many(self, calls: Iterable[ToolCall]) -> list[ToolResult]:
        """Run independent calls concurrently; results keep the call order."""
        return list(await asyncio.gather(*(self.execute_call(c) for c in calls)))
