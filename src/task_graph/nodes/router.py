"""
router.py — Shared routing function consulted after the plan node and after
every agent node.

The router is a small finite-state decision: if a plan step has no result
yet, go to the agent named by the first such step; otherwise go to solve.
Steps are executed strictly in plan order, so a step's #E references only
ever point at results that already exist.
"""

from __future__ import annotations

import re
from typing import Optional

from task_graph.schemas import TaskState

SOLVE_NODE = "solve"

_EVIDENCE_RE = re.compile(r"#E\d+")


def pending_steps(state: TaskState) -> list[dict]:
    results = state.get("results") or {}
    return [step for step in state.get("steps") or [] if step["step_id"] not in results]


def current_step(state: TaskState) -> Optional[dict]:
    """Return the first step without a result, or None when the plan is complete."""
    remaining = pending_steps(state)
    return remaining[0] if remaining else None


def route_next(state: TaskState) -> str:
    step = current_step(state)
    if step is None:
        return SOLVE_NODE
    return step["agent"]


def substitute_evidence(text: str, results: dict) -> str:
    """Replace #E<n> references in `text` with the recorded result for that step."""
    return _EVIDENCE_RE.sub(lambda m: str(results.get(m.group(0), m.group(0))), text)
