"""
solver.py — Final node: synthesise the accumulated step results into one answer.
"""

from __future__ import annotations

import logging

from langchain_core.language_models.chat_models import BaseChatModel

from task_graph.prompts import SOLVER_SYSTEM_PROMPT
from task_graph.schemas import OutputHandler, TaskState

logger = logging.getLogger(__name__)


def make_solve_node(model: BaseChatModel, output_handler: OutputHandler):

    async def solve_node(state: TaskState) -> dict:
        prompt = SOLVER_SYSTEM_PROMPT.format(
            plan=format_evidence(state.get("steps") or [], state.get("results") or {}),
            task=state.get("task", ""),
        )
        response = await model.ainvoke([{"role": "user", "content": prompt}])
        result = str(response.content).strip()

        await output_handler("result", result)
        return {"result": result}

    return solve_node


def format_evidence(steps: list[dict], results: dict) -> str:
    if not steps:
        return "No plan was needed for this task."
    lines = []
    for step in steps:
        description = step.get("description") or step["input"]
        lines.append(f"Plan: {description}")
        lines.append(f"{step['step_id']} = {step['agent']}[{step['input']}]")
        lines.append(f"Evidence: {results.get(step['step_id'], '')}")
    return "\n".join(lines)
