"""
Client side of the transport bridge.

One long-lived WebSocket connection to the task server:

  DISCONNECTED ──open──▶ IDLE ──query sent──▶ AWAITING_RESULT
       ▲                  ▲                        │
       │                  └──────── result ────────┘
       └──────────── close / connection failure (from any state)

"tool" frames are answered in AWAITING_RESULT without changing state;
"plan" frames are logged only. After a close the bridge waits a fixed
reconnect_delay and connects again, with no retry cap.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncContextManager, Awaitable, Callable, Optional

import aiohttp
from pydantic import ValidationError

from task_graph.bridge.resolvers import (
    NEEDS_HUMAN,
    PromptUser,
    console_prompt,
    default_resolver,
)
from task_graph.schemas import (
    FunctionCall,
    FunctionResponse,
    QueryMessage,
    ToolRequestMessage,
    ToolResponseMessage,
)

logger = logging.getLogger(__name__)

DEFAULT_QUERY = "what's 3*6 divided by 2"

Connector = Callable[[str], AsyncContextManager[Any]]


class BridgeState(str, Enum):
    DISCONNECTED = "disconnected"
    IDLE = "idle"
    AWAITING_RESULT = "awaiting_result"


@asynccontextmanager
async def aiohttp_connector(url: str):
    async with aiohttp.ClientSession() as session:
        async with session.ws_connect(url) as ws:
            yield ws


class TransportBridge:
    def __init__(
        self,
        url: str,
        resolver=None,
        prompt_user: Optional[PromptUser] = None,
        reconnect_delay: float = 5.0,
        connector: Optional[Connector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.url = url
        self.prompt_user = prompt_user or console_prompt
        self.resolver = resolver or default_resolver(self.prompt_user)
        self.reconnect_delay = reconnect_delay
        self._connect = connector or aiohttp_connector
        self._sleep = sleep

        self.state = BridgeState.DISCONNECTED
        self._ws = None
        self._task_started: Optional[float] = None

    # ── Connection loop ───────────────────────────────────────────────────────

    async def run_forever(self, max_attempts: Optional[int] = None) -> None:
        """Connect, serve the connection until it closes, wait, reconnect."""
        attempts = 0
        while True:
            attempts += 1
            try:
                await self._serve_connection()
            except (aiohttp.ClientError, OSError) as exc:
                logger.warning("Connection to %s failed: %s", self.url, exc)

            self.state = BridgeState.DISCONNECTED
            self._ws = None

            if max_attempts is not None and attempts >= max_attempts:
                return
            logger.info("Reconnecting in %.1fs", self.reconnect_delay)
            await self._sleep(self.reconnect_delay)

    async def _serve_connection(self) -> None:
        async with self._connect(self.url) as ws:
            self._ws = ws
            await self.on_open()
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    try:
                        data = json.loads(msg.data)
                    except ValueError:
                        logger.warning("Ignoring non-JSON frame: %r", msg.data)
                        continue
                    await self.dispatch(data)
                elif msg.type in (aiohttp.WSMsgType.CLOSE, aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                    break
        logger.info("Disconnected from server")

    async def on_open(self) -> None:
        logger.info("Connected to server")
        self.state = BridgeState.IDLE
        await self.prompt_and_send()

    # ── Outgoing ──────────────────────────────────────────────────────────────

    async def prompt_and_send(self) -> None:
        query = await self.prompt_user("Enter your message: ")
        if not query or not query.strip():
            query = DEFAULT_QUERY
            logger.info("No input provided. Using: %s", DEFAULT_QUERY)

        self._task_started = time.perf_counter()
        await self._send(QueryMessage(task=query))
        self.state = BridgeState.AWAITING_RESULT

    async def _send(self, message) -> None:
        if self._ws is None:
            logger.warning("Not connected; dropping %s frame", message.type)
            return
        await self._ws.send_str(message.model_dump_json())

    # ── Incoming ──────────────────────────────────────────────────────────────

    async def dispatch(self, data: dict) -> None:
        frame_type = data.get("type")

        if frame_type == "tool":
            try:
                request = ToolRequestMessage.model_validate(data)
            except ValidationError as exc:
                logger.warning("Ignoring malformed tool frame: %s", exc)
                return
            responses = [await self._resolve(call) for call in request.functions]
            await self._send(ToolResponseMessage.from_responses(responses))

        elif frame_type == "result":
            elapsed = ""
            if self._task_started is not None:
                elapsed = f" ({time.perf_counter() - self._task_started:.2f}s)"
                self._task_started = None
            logger.info("Result%s: %s", elapsed, data.get("message"))
            self.state = BridgeState.IDLE
            await self.prompt_and_send()

        elif frame_type == "plan":
            logger.info("Here is the plan:\n%s", data.get("message"))

        else:
            logger.info("Received message: %s", data)

    async def _resolve(self, call: FunctionCall) -> FunctionResponse:
        logger.info("Processing function: %s with args: %s", call.function_name, call.arguments)
        try:
            result = await self.resolver.try_resolve(call.function_name, call.arguments)
        except Exception as exc:
            # Always answer so the server is never left waiting on this call
            logger.exception("Function %s failed", call.function_name)
            result = f"Error: {exc}"

        if result is NEEDS_HUMAN:
            result = None
        logger.info("Result of %s: %s", call.function_name, result)
        return FunctionResponse(function_name=call.function_name, response=result)


def run_client(url: str, reconnect_delay: float = 5.0) -> None:
    asyncio.run(TransportBridge(url, reconnect_delay=reconnect_delay).run_forever())
