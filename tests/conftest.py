"""
conftest.py — Shared pytest fixtures for the task graph tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage

from task_graph.agents import build_agent_registry
from task_graph.schemas import ModelTier, Plan, PlanStep


class FakeModels:
    """
    Model-tier resolver backed by MagicMocks.

    Nodes call with_structured_output / bind_tools once at build time, so the
    canned replies are attached to the mocks' shared return values and can be
    set before or after the graph is built.
    """

    def __init__(self):
        self.fast = MagicMock(name="fast_model")
        self.strong = MagicMock(name="strong_model")

    def __call__(self, tier: ModelTier):
        return self.strong if tier is ModelTier.STRONG else self.fast

    def plan(self, *steps: tuple, tier: ModelTier = ModelTier.FAST):
        """steps: (step_id, agent, input) tuples."""
        plan = Plan(
            steps=[PlanStep(step_id=s, agent=a, input=i) for s, a, i in steps]
        )
        self(tier).with_structured_output.return_value.ainvoke = AsyncMock(return_value=plan)

    def tool_calls(self, tier: ModelTier, *calls: tuple):
        """calls: (tool_name, args) tuples, one model reply per call."""
        replies = [
            AIMessage(content="", tool_calls=[{"name": name, "args": args, "id": f"call_{i}"}])
            for i, (name, args) in enumerate(calls, 1)
        ]
        agent_llm = self(tier).bind_tools.return_value
        agent_llm.ainvoke = AsyncMock(side_effect=replies)
        return agent_llm

    def answer(self, text: str, tier: ModelTier = ModelTier.STRONG):
        self(tier).ainvoke = AsyncMock(return_value=AIMessage(content=text))


@pytest.fixture
def client_data():
    return [
        "Acme Books is an online bookstore. The user is a sales analyst.",
        "TRANSACTIONS(TRANSACTION_ID int, USER_ID int, USER_NAME text, PRODUCT_ID int, "
        "PRODUCT_NAME text, CATEGORY text, PRICE numeric, TRANSACTION_DATE date)",
    ]


@pytest.fixture
def registry(client_data):
    return build_agent_registry(client_data)


@pytest.fixture
def fake_models():
    return FakeModels()


@pytest.fixture
def output_handler():
    return AsyncMock()


@pytest.fixture
def tool_forwarder():
    return AsyncMock()
