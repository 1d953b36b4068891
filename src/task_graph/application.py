"""
application.py — Task runner.

GraphApplication wires one session together: agent registry, model tiers
and the compiled graph. process_task runs a single task to completion and
returns the solver's answer. Failures inside the graph propagate to the
caller.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Optional, Sequence

from task_graph.agents import build_agent_registry
from task_graph.configuration import AgentConfiguration
from task_graph.exceptions import ConfigurationError
from task_graph.main_graph import PLAN_NODE, build_graph, reachable_nodes
from task_graph.models import ModelResolver, make_model_resolver
from task_graph.schemas import OutputHandler, TaskInput, ToolForwarder

logger = logging.getLogger(__name__)


class GraphApplication:
    def __init__(
        self,
        output_handler: OutputHandler,
        tool_forwarder: ToolForwarder,
        client_data: Sequence[str],
        config: Optional[AgentConfiguration] = None,
        model_resolver: Optional[ModelResolver] = None,
    ):
        self.config = config or AgentConfiguration()
        self.registry = build_agent_registry(client_data)

        resolve = model_resolver or make_model_resolver(self.config)
        self.graph = build_graph(
            self.registry,
            planner_model=resolve(self.config.planner_tier),
            solver_model=resolve(self.config.solver_tier),
            agent_model_for=resolve,
            tool_forwarder=tool_forwarder,
            output_handler=output_handler,
        )

        unreachable = set(self.registry) - reachable_nodes(self.graph, PLAN_NODE)
        if unreachable:
            raise ConfigurationError(f"Agents not reachable from the plan node: {sorted(unreachable)}")

    async def process_task(self, task: str) -> str:
        """Invoke the graph for one task and return the final result text."""
        initial: TaskInput = {"task": task, "steps": [], "results": {}}
        started = time.perf_counter()

        invocation = self.graph.ainvoke(
            initial, config={"recursion_limit": self.config.recursion_limit}
        )
        if self.config.task_timeout is not None:
            final_state = await asyncio.wait_for(invocation, timeout=self.config.task_timeout)
        else:
            final_state = await invocation

        logger.info(
            "Final result (%.2fs): %s",
            time.perf_counter() - started,
            final_state.get("result", ""),
        )
        return final_state.get("result", "")
