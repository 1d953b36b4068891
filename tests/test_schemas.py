"""
test_schemas.py — Unit tests for schema models and reducer functions.
"""

import json

from task_graph.schemas import (
    FunctionResponse,
    Plan,
    PlanStep,
    ToolRequestMessage,
    ToolResponseMessage,
    merge_dicts,
)


def test_merge_dicts_combines_keys():
    result = merge_dicts({"#E1": "18"}, {"#E2": "9"})
    assert result == {"#E1": "18", "#E2": "9"}


def test_merge_dicts_b_wins_on_conflict():
    assert merge_dicts({"key": "original"}, {"key": "updated"}) == {"key": "updated"}


def test_merge_dicts_empty_inputs():
    assert merge_dicts({}, {}) == {}
    assert merge_dicts(None, {"b": 2}) == {"b": 2}


def test_plan_step_defaults():
    step = PlanStep(step_id="#E1", agent="calculate", input="3 * 6")
    assert step.description == ""
    assert Plan(steps=[step]).steps[0].agent == "calculate"


def test_tool_request_defaults_arguments():
    message = ToolRequestMessage.model_validate(
        {"type": "tool", "functions": [{"function_name": "getTables"}]}
    )
    assert message.functions[0].arguments == {}


def test_tool_response_payload_is_json_encoded_array():
    message = ToolResponseMessage.from_responses(
        [FunctionResponse(function_name="calculate", response="6")]
    )
    wire = json.loads(message.model_dump_json())
    assert wire["type"] == "toolResponse"
    assert isinstance(wire["response"], str)
    assert json.loads(wire["response"]) == [{"function_name": "calculate", "response": "6"}]
    assert message.responses()[0].response == "6"


def test_tool_response_allows_missing_answer():
    message = ToolResponseMessage(response=json.dumps([{"function_name": "organizeItems", "response": None}]))
    assert message.responses()[0].response is None
