"""
planner.py — Planning node.

Input:  task
Output: structured Plan → steps + plan_string in state
Route:  route_next (first agent of the plan, or solve for an empty plan)
"""

from __future__ import annotations

import logging
from typing import Mapping

from langchain_core.language_models.chat_models import BaseChatModel

from task_graph.agents import AgentSpec, agent_catalogue
from task_graph.exceptions import PlanValidationError
from task_graph.prompts import PLANNER_SYSTEM_PROMPT
from task_graph.schemas import OutputHandler, Plan, TaskState

logger = logging.getLogger(__name__)


def make_plan_node(
    model: BaseChatModel,
    registry: Mapping[str, AgentSpec],
    output_handler: OutputHandler,
):
    """
    Create the plan node.

    The planner model returns a Plan via structured output. Steps naming an
    agent that is not in the registry, or reusing an earlier step_id, are
    rejected with PlanValidationError.
    The rendered plan is sent through output_handler("plan", ...) before the
    first agent runs.
    """
    llm = model.with_structured_output(Plan)
    system_prompt = PLANNER_SYSTEM_PROMPT.format(agent_catalogue=agent_catalogue(registry))

    async def plan_node(state: TaskState) -> dict:
        task = state.get("task", "")

        plan: Plan = await llm.ainvoke(
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": f"Task: {task}"},
            ]
        )

        unknown = sorted({step.agent for step in plan.steps if step.agent not in registry})
        if unknown:
            raise PlanValidationError(
                f"Plan references unknown agent(s): {', '.join(unknown)}. "
                f"Registered agents: {', '.join(registry)}"
            )

        step_ids = [step.step_id for step in plan.steps]
        duplicates = sorted({sid for sid in step_ids if step_ids.count(sid) > 1})
        if duplicates:
            # Results are keyed by step_id; a repeated id would never run
            raise PlanValidationError(f"Plan repeats step id(s): {', '.join(duplicates)}")

        plan_string = format_plan(plan)
        logger.info("Plan with %d step(s) for task %r", len(plan.steps), task)
        await output_handler("plan", plan_string)

        return {
            "steps": [step.model_dump() for step in plan.steps],
            "plan_string": plan_string,
        }

    return plan_node


def format_plan(plan: Plan) -> str:
    """Render a Plan as display-ready text, one step per line."""
    if not plan.steps:
        return "No steps planned."
    lines = []
    for step in plan.steps:
        description = f"Plan: {step.description} " if step.description else ""
        lines.append(f"{description}{step.step_id} = {step.agent}[{step.input}]")
    return "\n".join(lines)
