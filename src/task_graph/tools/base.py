"""
Tool registry for the task graph agents.

Exports:
  ToolKind          — explicit tag for every tool an agent can carry
  ToolRef           — (kind, tool) pair attached to an AgentSpec
  ALL_TOOLS_REGISTRY — every tool keyed by ToolKind: a BaseTool when it runs
                       in-process, a function schema when the client answers it
  get_tool_ref()    — resolve a ToolKind -> ToolRef
  run_tool_calls()  — execute tool calls in-process
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from langchain_core.tools import BaseTool

from task_graph.schemas import FunctionCall, FunctionResponse
from task_graph.tools.calculator import calculator_tool
from task_graph.tools.client_tools import (
    create_chart_tool,
    data_retriever_tool,
    filter_data_tool,
    generate_insight_tool,
    get_tables_tool,
    organize_items_tool,
)


class ToolKind(str, Enum):
    CALCULATE = "calculate"
    ORGANIZE_ITEMS = "organize_items"
    FILTER_DATA = "filter_data"
    GET_TABLES = "get_tables"
    DATA_RETRIEVER = "data_retriever"
    CREATE_CHART = "create_chart"
    GENERATE_INSIGHT = "generate_insight"


@dataclass(frozen=True)
class ToolRef:
    kind: ToolKind
    tool: Union[BaseTool, Dict[str, Any]] = field(hash=False)

    @property
    def name(self) -> str:
        """Function name used on the wire and in model tool calls."""
        if isinstance(self.tool, BaseTool):
            return self.tool.name
        return self.tool["function"]["name"]

    @property
    def runs_in_process(self) -> bool:
        return isinstance(self.tool, BaseTool)


# ── Registry ───────────────────────────────────────────────────────────────────

ALL_TOOLS_REGISTRY: Dict[ToolKind, Union[BaseTool, Dict[str, Any]]] = {
    ToolKind.CALCULATE:        calculator_tool,
    ToolKind.ORGANIZE_ITEMS:   organize_items_tool,
    ToolKind.FILTER_DATA:      filter_data_tool,
    ToolKind.GET_TABLES:       get_tables_tool,
    ToolKind.DATA_RETRIEVER:   data_retriever_tool,
    ToolKind.CREATE_CHART:     create_chart_tool,
    ToolKind.GENERATE_INSIGHT: generate_insight_tool,
}


# ── Helpers ────────────────────────────────────────────────────────────────────

def get_tool_ref(kind: ToolKind) -> ToolRef:
    return ToolRef(kind=kind, tool=ALL_TOOLS_REGISTRY[kind])


async def run_tool_calls(tool: BaseTool, calls: List[FunctionCall]) -> List[FunctionResponse]:
    """
    Execute tool calls in-process, in order.

    Calls naming a different tool than the one bound are answered with an
    error string rather than executed; tool exceptions propagate.
    """
    responses: list[FunctionResponse] = []
    for call in calls:
        if call.function_name != tool.name:
            content = f"Unknown tool: {call.function_name}"
        else:
            content = str(await tool.ainvoke(call.arguments))
        responses.append(FunctionResponse(function_name=call.function_name, response=content))
    return responses
