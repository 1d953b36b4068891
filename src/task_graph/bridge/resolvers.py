"""
Tool resolvers used by the client side of the bridge.

Each resolver answers try_resolve(name, args) with a response string, or
NEEDS_HUMAN when it cannot handle the call. ChainedResolver tries its
resolvers in order, so local deterministic answers win over the human
prompt.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from task_graph.tools.calculator import calculate, format_result

logger = logging.getLogger(__name__)

PromptUser = Callable[[str], Awaitable[str]]


class _NeedsHuman:
    def __repr__(self) -> str:
        return "NEEDS_HUMAN"


NEEDS_HUMAN = _NeedsHuman()

Resolution = Union[str, _NeedsHuman]


async def console_prompt(message: str) -> str:
    """Read one line from stdin without blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, message)


# ── Canned data for the data-retrieval / insight stubs ───────────────────────

SAMPLE_TRANSACTIONS = [
    {"TRANSACTION_ID": 1, "USER_ID": 101, "USER_NAME": "John Doe", "PRODUCT_ID": 201,
     "PRODUCT_NAME": "Thriller Novel", "CATEGORY": "Books", "PRICE": 14.99,
     "TRANSACTION_DATE": "2024-05-10"},
    {"TRANSACTION_ID": 2, "USER_ID": 102, "USER_NAME": "Jane Smith", "PRODUCT_ID": 201,
     "PRODUCT_NAME": "Thriller Novel", "CATEGORY": "Books", "PRICE": 14.99,
     "TRANSACTION_DATE": "2024-05-11"},
    {"TRANSACTION_ID": 3, "USER_ID": 103, "USER_NAME": "Alice Johnson", "PRODUCT_ID": 201,
     "PRODUCT_NAME": "Thriller Novel", "CATEGORY": "Books", "PRICE": 14.99,
     "TRANSACTION_DATE": "2024-05-12"},
]

SAMPLE_INSIGHT = (
    "The transactions for the 'Thriller Novel' occurred consecutively over three days "
    "(May 10th to May 12th)."
)


def _calculate(args: dict[str, Any]) -> str:
    return format_result(calculate(args.get("a"), args.get("b"), args.get("operator", "")))


def _retrieve_data(args: dict[str, Any]) -> str:
    logger.info("Executing SQL query: %s", args.get("query", ""))
    return json.dumps(SAMPLE_TRANSACTIONS)


def _generate_insight(args: dict[str, Any]) -> str:
    logger.info("Analyzing retrieved data: %s", args.get("data", ""))
    return SAMPLE_INSIGHT


class LocalToolResolver:
    """Deterministic answers for the calculator and the data stubs."""

    def __init__(self, handlers: Optional[dict[str, Callable[[dict], str]]] = None):
        self.handlers = handlers if handlers is not None else {
            "calculate": _calculate,
            "dataRetriever": _retrieve_data,
            "generateInsight": _generate_insight,
        }

    async def try_resolve(self, name: str, args: dict[str, Any]) -> Resolution:
        handler = self.handlers.get(name)
        if handler is None:
            return NEEDS_HUMAN
        return handler(args)


class HumanToolResolver:
    """Ask the operator to type the response."""

    def __init__(self, prompt_user: Optional[PromptUser] = None):
        self.prompt_user = prompt_user or console_prompt

    async def try_resolve(self, name: str, args: dict[str, Any]) -> Resolution:
        answer = await self.prompt_user(f"Enter your response for {name} {json.dumps(args)}: ")
        logger.info("Response for %s: %s", name, answer)
        return answer


class ChainedResolver:
    def __init__(self, *resolvers):
        self.resolvers = resolvers

    async def try_resolve(self, name: str, args: dict[str, Any]) -> Resolution:
        for resolver in self.resolvers:
            result = await resolver.try_resolve(name, args)
            if result is not NEEDS_HUMAN:
                return result
        return NEEDS_HUMAN


def default_resolver(prompt_user: Optional[PromptUser] = None) -> ChainedResolver:
    return ChainedResolver(LocalToolResolver(), HumanToolResolver(prompt_user))
