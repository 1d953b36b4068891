from task_graph.tools.calculator import calculate, calculator_tool, SUPPORTED_OPERATORS
from task_graph.tools.client_tools import (
    create_chart_tool,
    data_retriever_tool,
    filter_data_tool,
    generate_insight_tool,
    get_tables_tool,
    organize_items_tool,
)
from task_graph.tools.base import (
    ALL_TOOLS_REGISTRY,
    ToolKind,
    ToolRef,
    get_tool_ref,
    run_tool_calls,
)

__all__ = [
    # Individual tools
    "calculate",
    "calculator_tool",
    "organize_items_tool",
    "filter_data_tool",
    "get_tables_tool",
    "data_retriever_tool",
    "create_chart_tool",
    "generate_insight_tool",
    "SUPPORTED_OPERATORS",
    # Registry & helpers
    "ALL_TOOLS_REGISTRY",
    "ToolKind",
    "ToolRef",
    "get_tool_ref",
    "run_tool_calls",
]
