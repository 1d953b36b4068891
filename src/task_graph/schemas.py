from __future__ import annotations

import json
import operator
from enum import Enum
from typing import Annotated, Any, Awaitable, Callable, Literal, Optional, Union

from typing_extensions import TypedDict
from pydantic import BaseModel, Field


# ── Reducers ──────────────────────────────────────────────────────────────────

def merge_dicts(a: dict, b: dict) -> dict:
    """Reducer: shallow-merge two dicts (b wins on key conflicts).
    Each agent node writes the result for its own step_id, so results
    accumulate across the traversal without being overwritten."""
    return {**(a or {}), **(b or {})}


# ── Model tiers ───────────────────────────────────────────────────────────────

class ModelTier(str, Enum):
    FAST = "fast"
    STRONG = "strong"


# ── Graph State ───────────────────────────────────────────────────────────────

class TaskState(TypedDict, total=False):
    """
    State carried through one graph invocation.

    `steps` is append-only (operator.add) and `results` is a completion map
    keyed by step_id. Both are only ever added to.
    """

    task: str
    plan_string: str
    steps: Annotated[list[dict], operator.add]     # [{step_id, agent, input, description}]
    results: Annotated[dict, merge_dicts]          # {step_id: output}
    result: str


class TaskInput(TypedDict):
    """What the runner passes in to start an invocation."""
    task: str
    steps: list[dict]
    results: dict


# ── Structured Output: Plan ─────────────────────────────────────────────────────

class PlanStep(BaseModel):
    """A single step of the plan, executed by exactly one agent."""
    step_id: str = Field(description="Evidence variable for this step, e.g. '#E1'")
    agent: str = Field(description="Name of the agent that executes this step")
    input: str = Field(
        description="Input for the agent. May reference earlier results as #E1, #E2, ..."
    )
    description: str = Field(default="", description="What this step accomplishes")


class Plan(BaseModel):
    """Ordered plan produced by the planner."""
    steps: list[PlanStep] = Field(description="Ordered list of steps")


# ── Wire Protocol ─────────────────────────────────────────────────────────────
# JSON frames exchanged over the single duplex connection.

class FunctionCall(BaseModel):
    function_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)


class FunctionResponse(BaseModel):
    function_name: str
    response: Optional[str] = None


class QueryMessage(BaseModel):
    type: Literal["query"] = "query"
    task: str


class ToolRequestMessage(BaseModel):
    type: Literal["tool"] = "tool"
    functions: list[FunctionCall]


class ToolResponseMessage(BaseModel):
    """`response` is itself a JSON-encoded array of FunctionResponse objects."""
    type: Literal["toolResponse"] = "toolResponse"
    response: str

    @classmethod
    def from_responses(cls, responses: list[FunctionResponse]) -> "ToolResponseMessage":
        return cls(response=json.dumps([r.model_dump() for r in responses]))

    def responses(self) -> list[FunctionResponse]:
        return [FunctionResponse.model_validate(item) for item in json.loads(self.response)]


class ResultMessage(BaseModel):
    type: Literal["result"] = "result"
    message: str


class PlanMessage(BaseModel):
    type: Literal["plan"] = "plan"
    message: str


Frame = Annotated[
    Union[QueryMessage, ToolRequestMessage, ToolResponseMessage, ResultMessage, PlanMessage],
    Field(discriminator="type"),
]


# ── Callbacks ─────────────────────────────────────────────────────────────────

# Sends a "plan" or "result" message to whoever started the task.
OutputHandler = Callable[[Literal["plan", "result"], str], Awaitable[None]]

# Forwards tool calls to the connected client and returns its responses in order.
ToolForwarder = Callable[[list[FunctionCall]], Awaitable[list[FunctionResponse]]]


__all__ = [
    "merge_dicts",
    "ModelTier",
    "TaskState",
    "TaskInput",
    "PlanStep",
    "Plan",
    "FunctionCall",
    "FunctionResponse",
    "QueryMessage",
    "ToolRequestMessage",
    "ToolResponseMessage",
    "ResultMessage",
    "PlanMessage",
    "Frame",
    "OutputHandler",
    "ToolForwarder",
]
