"""
main_graph.py — Compiled task graph.

Graph flow:
  START
    → plan                  (structured Plan; emits plan text)
    → <agent> × N           (one node per registered agent, visited per plan step)
    → solve                 (synthesises the step results)
    → END

The plan node and every agent node share one conditional edge, route_next,
which picks the agent of the next pending step or solve once every step has
a result. The builder only assembles topology; all decisions live in the
router.
"""

from __future__ import annotations

from typing import Mapping, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langgraph.graph import END, START, StateGraph

from task_graph.agents import AgentSpec
from task_graph.models import ModelResolver
from task_graph.nodes.agent_node import make_agent_node
from task_graph.nodes.planner import make_plan_node
from task_graph.nodes.router import SOLVE_NODE, route_next
from task_graph.nodes.solver import make_solve_node
from task_graph.schemas import OutputHandler, TaskInput, TaskState, ToolForwarder

PLAN_NODE = "plan"
RESERVED_NODE_NAMES = frozenset({PLAN_NODE, SOLVE_NODE})


def build_graph(
    registry: Mapping[str, AgentSpec],
    *,
    planner_model: BaseChatModel,
    solver_model: BaseChatModel,
    agent_model_for: ModelResolver,
    tool_forwarder: ToolForwarder,
    output_handler: OutputHandler,
    checkpointer=None,
):
    """
    Build and compile the task graph.

    Args:
        registry:        agent name → AgentSpec; one node is created per entry.
        planner_model:   model that produces the Plan.
        solver_model:    model that writes the final answer.
        agent_model_for: resolves an agent's ModelTier to a chat model.
        tool_forwarder:  sends client-resolved tool calls over the bridge.
        output_handler:  receives the "plan" and "result" messages.
        checkpointer:    optional LangGraph checkpointer.

    Returns:
        CompiledStateGraph ready for invocation.
    """
    clashes = RESERVED_NODE_NAMES.intersection(registry)
    if clashes:
        raise ValueError(f"Agent names clash with reserved node names: {sorted(clashes)}")

    builder = StateGraph(TaskState, input_schema=TaskInput)

    # Every non-terminal node can continue to any agent or finish at solve
    destinations: dict[str, str] = {name: name for name in registry}
    destinations[SOLVE_NODE] = SOLVE_NODE

    # ── Register nodes ────────────────────────────────────────────────────────
    builder.add_node(PLAN_NODE, make_plan_node(planner_model, registry, output_handler))
    builder.add_node(SOLVE_NODE, make_solve_node(solver_model, output_handler))

    for name, spec in registry.items():
        builder.add_node(
            name,
            make_agent_node(spec, agent_model_for(spec.model_tier), tool_forwarder),
        )
        builder.add_conditional_edges(name, route_next, destinations)

    # ── Edges ─────────────────────────────────────────────────────────────────
    builder.add_edge(START, PLAN_NODE)
    builder.add_conditional_edges(PLAN_NODE, route_next, destinations)
    builder.add_edge(SOLVE_NODE, END)

    return builder.compile(checkpointer=checkpointer)


def reachable_nodes(compiled_graph, start: str = PLAN_NODE) -> set[str]:
    """Node ids reachable from `start` following the drawable graph's edges."""
    drawable = compiled_graph.get_graph()
    adjacency: dict[str, set[str]] = {}
    for edge in drawable.edges:
        adjacency.setdefault(edge.source, set()).add(edge.target)

    seen = {start}
    frontier = [start]
    while frontier:
        node = frontier.pop()
        for target in adjacency.get(node, ()):
            if target not in seen:
                seen.add(target)
                frontier.append(target)
    return seen
