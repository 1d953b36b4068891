"""
agents.py — Agent registry.

One table entry per agent: model tier, instruction prompt, the single tool
it carries and whether that tool is answered by the connected client.
Adding an agent means adding an entry to `_agent_table`; the graph builder
creates a node for every registered name.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

from task_graph.exceptions import ConfigurationError
from task_graph.prompts import (
    CALCULATE_AGENT_PROMPT,
    CREATE_CHART_AGENT_PROMPT,
    FILTER_DATA_AGENT_PROMPT,
    GENERATE_INSIGHT_AGENT_PROMPT,
    GET_DATA_AGENT_PROMPT,
    GET_TABLES_AGENT_PROMPT,
    ORGANIZE_AGENT_PROMPT,
)
from task_graph.schemas import ModelTier
from task_graph.tools.base import ToolKind, ToolRef, get_tool_ref

logger = logging.getLogger(__name__)

MIN_CLIENT_DATA_FIELDS = 2


@dataclass(frozen=True)
class AgentSpec:
    name: str
    model_tier: ModelTier
    prompt: str
    tool: ToolRef
    forwards_to_human: bool
    description: str = ""


def _agent_table(client_description: str, table_schemas: str) -> list[AgentSpec]:
    return [
        AgentSpec(
            name="calculate",
            model_tier=ModelTier.FAST,
            prompt=CALCULATE_AGENT_PROMPT,
            tool=get_tool_ref(ToolKind.CALCULATE),
            forwards_to_human=False,
            description="performs one arithmetic operation (add, subtract, multiply, divide, power, root)",
        ),
        AgentSpec(
            name="organize",
            model_tier=ModelTier.FAST,
            prompt=ORGANIZE_AGENT_PROMPT,
            tool=get_tool_ref(ToolKind.ORGANIZE_ITEMS),
            forwards_to_human=True,
            description="rearranges the items of an array",
        ),
        AgentSpec(
            name="filterData",
            model_tier=ModelTier.FAST,
            prompt=FILTER_DATA_AGENT_PROMPT,
            tool=get_tool_ref(ToolKind.FILTER_DATA),
            forwards_to_human=True,
            description="filters a JSON array of objects on a field",
        ),
        AgentSpec(
            name="getTables",
            model_tier=ModelTier.STRONG,
            prompt=GET_TABLES_AGENT_PROMPT.format(client_description=client_description),
            tool=get_tool_ref(ToolKind.GET_TABLES),
            forwards_to_human=True,
            description="chooses the database tables relevant to a request",
        ),
        AgentSpec(
            name="getData",
            model_tier=ModelTier.FAST,
            prompt=GET_DATA_AGENT_PROMPT.format(table_schemas=table_schemas),
            tool=get_tool_ref(ToolKind.DATA_RETRIEVER),
            forwards_to_human=True,
            description="writes and runs a PostgreSQL query to retrieve data",
        ),
        AgentSpec(
            name="createChart",
            model_tier=ModelTier.STRONG,
            prompt=CREATE_CHART_AGENT_PROMPT,
            tool=get_tool_ref(ToolKind.CREATE_CHART),
            forwards_to_human=True,
            description="turns a JSON array into chart labels, data and chart type",
        ),
        AgentSpec(
            name="generateInsight",
            model_tier=ModelTier.FAST,
            prompt=GENERATE_INSIGHT_AGENT_PROMPT,
            tool=get_tool_ref(ToolKind.GENERATE_INSIGHT),
            forwards_to_human=True,
            description="produces a business insight from retrieved data",
        ),
    ]


def build_agent_registry(client_data: Sequence[str]) -> Mapping[str, AgentSpec]:
    """
    Build the read-only agent registry for one session.

    Args:
        client_data: [0] company and user description, [1] the client's tables
                     and their structure. Extra entries are ignored.

    Raises:
        ConfigurationError: fewer than two client_data entries were supplied.
    """
    if len(client_data) < MIN_CLIENT_DATA_FIELDS:
        raise ConfigurationError(
            f"client_data needs at least {MIN_CLIENT_DATA_FIELDS} fields: "
            "[0] company and user description, [1] tables and their structure "
            f"(got {len(client_data)})"
        )

    specs = _agent_table(client_description=client_data[0], table_schemas=client_data[1])
    registry = {spec.name: spec for spec in specs}
    logger.debug("Agent registry built with %d agents: %s", len(registry), ", ".join(registry))
    return MappingProxyType(registry)


def agent_catalogue(registry: Mapping[str, AgentSpec]) -> str:
    """Render the registry as the agent list shown to the planner."""
    return "\n".join(f"- {spec.name}: {spec.description}" for spec in registry.values())
