"""
test_bridge_client.py — Unit tests for the client side of the transport bridge.

The WebSocket is replaced with an in-memory fake; sleep is an AsyncMock so
reconnect delays cost nothing.
"""

import json
from contextlib import asynccontextmanager
from types import SimpleNamespace
from unittest.mock import AsyncMock

import aiohttp
import pytest

from task_graph.bridge.client import DEFAULT_QUERY, BridgeState, TransportBridge


class FakeWebSocket:
    def __init__(self, frames=()):
        self.sent: list[dict] = []
        self._incoming = [
            SimpleNamespace(type=aiohttp.WSMsgType.TEXT, data=json.dumps(f)) for f in frames
        ]

    async def send_str(self, data: str) -> None:
        self.sent.append(json.loads(data))

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._incoming:
            raise StopAsyncIteration
        return self._incoming.pop(0)


def make_connector(*outcomes):
    """Each connection attempt consumes one outcome: a FakeWebSocket or an exception."""
    queue = list(outcomes)
    attempts: list[str] = []

    @asynccontextmanager
    async def connector(url):
        attempts.append(url)
        outcome = queue.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        yield outcome

    connector.attempts = attempts
    return connector


def _bridge(prompt_user=None, **kwargs):
    return TransportBridge(
        "ws://test",
        prompt_user=prompt_user or AsyncMock(return_value="what is 2 + 2"),
        **kwargs,
    )


def _connected(bridge):
    ws = FakeWebSocket()
    bridge._ws = ws
    bridge.state = BridgeState.AWAITING_RESULT
    return ws


# ── Tool frames ───────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_tool_frame_gets_exactly_one_response_in_order():
    bridge = _bridge()
    ws = _connected(bridge)

    await bridge.dispatch({
        "type": "tool",
        "functions": [
            {"function_name": "calculate", "arguments": {"a": 18, "b": 3, "operator": "divide"}},
            {"function_name": "dataRetriever", "arguments": {"query": "SELECT * FROM TRANSACTIONS"}},
            {"function_name": "calculate", "arguments": {"a": "2", "b": "10", "operator": "^"}},
        ],
    })

    assert len(ws.sent) == 1
    frame = ws.sent[0]
    assert frame["type"] == "toolResponse"
    responses = json.loads(frame["response"])
    assert [r["function_name"] for r in responses] == ["calculate", "dataRetriever", "calculate"]
    assert responses[0]["response"] == "6"
    assert json.loads(responses[1]["response"])[0]["PRODUCT_NAME"] == "Thriller Novel"
    assert responses[2]["response"] == "1024"
    assert bridge.state is BridgeState.AWAITING_RESULT


@pytest.mark.asyncio
async def test_unknown_operator_is_reported_not_raised():
    bridge = _bridge()
    ws = _connected(bridge)

    await bridge.dispatch({
        "type": "tool",
        "functions": [{"function_name": "calculate", "arguments": {"a": 1, "b": 2, "operator": "%"}}],
    })

    responses = json.loads(ws.sent[0]["response"])
    assert responses == [{"function_name": "calculate", "response": "Error: Unknown operator: %"}]


@pytest.mark.asyncio
async def test_unknown_function_falls_back_to_human():
    prompt = AsyncMock(return_value="[1, 2, 3]")
    bridge = _bridge(prompt_user=prompt)
    ws = _connected(bridge)

    await bridge.dispatch({
        "type": "tool",
        "functions": [{"function_name": "organizeItems", "arguments": {"items": "[3, 1, 2]"}}],
    })

    assert "organizeItems" in prompt.await_args.args[0]
    responses = json.loads(ws.sent[0]["response"])
    assert responses == [{"function_name": "organizeItems", "response": "[1, 2, 3]"}]


@pytest.mark.asyncio
async def test_generate_insight_stub():
    bridge = _bridge()
    ws = _connected(bridge)

    await bridge.dispatch({
        "type": "tool",
        "functions": [{"function_name": "generateInsight", "arguments": {"data": "[]"}}],
    })

    responses = json.loads(ws.sent[0]["response"])
    assert "Thriller Novel" in responses[0]["response"]


# ── Result / plan frames ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_plan_frame_does_not_change_state():
    prompt = AsyncMock()
    bridge = _bridge(prompt_user=prompt)
    ws = _connected(bridge)

    await bridge.dispatch({"type": "plan", "message": "#E1 = calculate[3 * 6]"})

    assert bridge.state is BridgeState.AWAITING_RESULT
    assert ws.sent == []
    prompt.assert_not_awaited()


@pytest.mark.asyncio
async def test_result_frame_prompts_for_next_task():
    prompt = AsyncMock(return_value="next task")
    bridge = _bridge(prompt_user=prompt)
    ws = _connected(bridge)

    await bridge.dispatch({"type": "result", "message": "9"})

    prompt.assert_awaited_once()
    assert ws.sent == [{"type": "query", "task": "next task"}]
    assert bridge.state is BridgeState.AWAITING_RESULT


@pytest.mark.asyncio
async def test_empty_input_sends_default_query():
    bridge = _bridge(prompt_user=AsyncMock(return_value="   "))
    ws = _connected(bridge)

    await bridge.prompt_and_send()

    assert ws.sent == [{"type": "query", "task": DEFAULT_QUERY}]


@pytest.mark.asyncio
async def test_unknown_frame_type_is_ignored():
    bridge = _bridge()
    ws = _connected(bridge)

    await bridge.dispatch({"type": "heartbeat"})

    assert ws.sent == []
    assert bridge.state is BridgeState.AWAITING_RESULT


# ── Connection lifecycle ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_open_moves_to_idle_then_sends_query():
    states_at_prompt = []
    bridge = None

    async def prompt(message):
        states_at_prompt.append(bridge.state)
        return "what is 2 + 2"

    ws = FakeWebSocket()
    sleep = AsyncMock()
    bridge = _bridge(prompt_user=prompt, connector=make_connector(ws), sleep=sleep)
    assert bridge.state is BridgeState.DISCONNECTED

    await bridge.run_forever(max_attempts=1)

    assert states_at_prompt == [BridgeState.IDLE]
    assert ws.sent == [{"type": "query", "task": "what is 2 + 2"}]
    assert bridge.state is BridgeState.DISCONNECTED
    sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_close_triggers_one_reconnect_after_delay():
    connector = make_connector(FakeWebSocket(), FakeWebSocket())
    sleep = AsyncMock()
    prompt = AsyncMock(return_value="task")
    bridge = _bridge(prompt_user=prompt, connector=connector, sleep=sleep, reconnect_delay=5.0)

    await bridge.run_forever(max_attempts=2)

    assert connector.attempts == ["ws://test", "ws://test"]
    sleep.assert_awaited_once_with(5.0)
    # Re-prompted once per successful open
    assert prompt.await_count == 2


@pytest.mark.asyncio
async def test_failed_connection_stays_disconnected_and_retries():
    connector = make_connector(
        aiohttp.ClientConnectionError("refused"),
        aiohttp.ClientConnectionError("refused"),
        FakeWebSocket(),
    )
    sleep = AsyncMock()
    prompt = AsyncMock(return_value="task")
    bridge = _bridge(prompt_user=prompt, connector=connector, sleep=sleep, reconnect_delay=2.5)

    await bridge.run_forever(max_attempts=3)

    assert len(connector.attempts) == 3
    assert sleep.await_count == 2
    assert all(call.args == (2.5,) for call in sleep.await_args_list)
    # Idle (and the prompt) only after the one successful open
    prompt.assert_awaited_once()


@pytest.mark.asyncio
async def test_full_exchange_over_one_connection():
    ws = FakeWebSocket(frames=[
        {"type": "plan", "message": "#E1 = calculate[3 * 6]"},
        {"type": "tool", "functions": [
            {"function_name": "calculate", "arguments": {"a": 3, "b": 6, "operator": "multiply"}},
        ]},
        {"type": "result", "message": "18"},
    ])
    prompt = AsyncMock(side_effect=["what's 3 * 6", "thanks"])
    bridge = _bridge(prompt_user=prompt, connector=make_connector(ws), sleep=AsyncMock())

    await bridge.run_forever(max_attempts=1)

    assert [frame["type"] for frame in ws.sent] == ["query", "toolResponse", "query"]
    assert json.loads(ws.sent[1]["response"]) == [{"function_name": "calculate", "response": "18"}]
    assert ws.sent[2]["task"] == "thanks"


@pytest.mark.asyncio
async def test_malformed_tool_frame_is_skipped():
    bridge = _bridge()
    ws = _connected(bridge)

    await bridge.dispatch(
        {"type": "tool", "functions": [{"function_name": "organizeItems", "arguments": "[3,1,2]"}]}
    )

    assert ws.sent == []
    assert bridge.state is BridgeState.AWAITING_RESULT


@pytest.mark.asyncio
async def test_malformed_tool_frame_does_not_stop_reconnects():
    bad = FakeWebSocket(frames=[
        {"type": "tool", "functions": [{"function_name": "organizeItems", "arguments": "[3,1,2]"}]},
    ])
    connector = make_connector(bad, FakeWebSocket())
    sleep = AsyncMock()
    bridge = _bridge(connector=connector, sleep=sleep, reconnect_delay=1.0)

    await bridge.run_forever(max_attempts=2)

    assert len(connector.attempts) == 2
    sleep.assert_awaited_once_with(1.0)
    assert [frame["type"] for frame in bad.sent] == ["query"]
