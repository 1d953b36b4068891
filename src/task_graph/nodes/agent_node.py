"""
agent_node.py — Node factory for the tool-equipped agents.

Each agent node executes exactly one plan step: the first step without a
result. It asks its model for a call to its single tool, then either runs
the tool in-process or forwards the call to the connected client. The step
output is written to results[step_id].
"""

from __future__ import annotations

import logging

from langchain_core.language_models.chat_models import BaseChatModel

from task_graph.agents import AgentSpec
from task_graph.exceptions import ConfigurationError
from task_graph.nodes.router import current_step, substitute_evidence
from task_graph.schemas import FunctionCall, FunctionResponse, TaskState, ToolForwarder
from task_graph.tools.base import run_tool_calls

logger = logging.getLogger(__name__)


def make_agent_node(spec: AgentSpec, model: BaseChatModel, tool_forwarder: ToolForwarder):
    if not spec.forwards_to_human and not spec.tool.runs_in_process:
        raise ConfigurationError(
            f"Agent {spec.name} runs its tool in-process but {spec.tool.name} is schema-only"
        )

    # tool_choice forces a call to the agent's one tool every turn
    llm = model.bind_tools([spec.tool.tool], tool_choice=spec.tool.name)

    async def agent_node(state: TaskState) -> dict:
        step = current_step(state)
        if step is None or step["agent"] != spec.name:
            # Router only sends us here for our own pending step
            logger.warning("Agent %s reached with no pending step of its own", spec.name)
            return {}

        results = state.get("results") or {}
        tool_input = substitute_evidence(step["input"], results)

        response = await llm.ainvoke(
            [
                {"role": "system", "content": spec.prompt},
                {"role": "user", "content": tool_input},
            ]
        )

        calls = [
            FunctionCall(function_name=tc["name"], arguments=tc["args"])
            for tc in getattr(response, "tool_calls", None) or []
        ]

        if not calls:
            output = str(response.content)
        elif spec.forwards_to_human:
            logger.debug("Forwarding %d %s call(s) to client", len(calls), spec.tool.name)
            output = _join_responses(await tool_forwarder(calls))
        else:
            output = _join_responses(await run_tool_calls(spec.tool.tool, calls))

        logger.info("%s %s -> %s", step["step_id"], spec.name, _preview(output))
        return {"results": {step["step_id"]: output}}

    return agent_node


def _join_responses(responses: list[FunctionResponse]) -> str:
    return "\n".join("" if r.response is None else str(r.response) for r in responses)


def _preview(text: str, limit: int = 200) -> str:
    return text if len(text) <= limit else text[:limit] + "..."
