"""
Server side of the transport bridge.

An aiohttp WebSocket endpoint. Each connection gets a BridgeSession that
owns one GraphApplication:

  query        → start the task (one in flight per connection)
  toolResponse → completes the pending tool forward

The graph talks back through two callbacks: the output handler sends
"plan" / "result" frames, and the tool forwarder sends a "tool" frame and
waits for the matching "toolResponse".
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Literal, Optional, Sequence

from aiohttp import WSMsgType, web
from pydantic import TypeAdapter, ValidationError

from task_graph.agents import build_agent_registry
from task_graph.application import GraphApplication
from task_graph.configuration import AgentConfiguration
from task_graph.exceptions import ProtocolError
from task_graph.models import ModelResolver
from task_graph.schemas import (
    Frame,
    FunctionCall,
    FunctionResponse,
    PlanMessage,
    QueryMessage,
    ResultMessage,
    ToolRequestMessage,
    ToolResponseMessage,
)

logger = logging.getLogger(__name__)

_FRAME_ADAPTER = TypeAdapter(Frame)

CLIENT_DATA_KEY = web.AppKey("client_data", list)
CONFIG_KEY = web.AppKey("config", AgentConfiguration)
MODEL_RESOLVER_KEY = web.AppKey("model_resolver", object)


def parse_frame(data: dict):
    try:
        return _FRAME_ADAPTER.validate_python(data)
    except ValidationError as exc:
        raise ProtocolError(f"Invalid frame: {exc}") from exc


class BridgeSession:
    def __init__(
        self,
        ws,
        client_data: Sequence[str],
        config: Optional[AgentConfiguration] = None,
        model_resolver: Optional[ModelResolver] = None,
    ):
        self.ws = ws
        self.config = config or AgentConfiguration()
        self._pending: Optional[asyncio.Future] = None
        self._task: Optional[asyncio.Task] = None
        self.application = GraphApplication(
            output_handler=self.send_output,
            tool_forwarder=self.forward_tools,
            client_data=client_data,
            config=self.config,
            model_resolver=model_resolver,
        )

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    async def _send(self, message) -> None:
        await self.ws.send_str(message.model_dump_json())

    # ── Graph callbacks ───────────────────────────────────────────────────────

    async def send_output(self, kind: Literal["plan", "result"], message: str) -> None:
        frame = PlanMessage(message=message) if kind == "plan" else ResultMessage(message=message)
        await self._send(frame)

    async def forward_tools(self, calls: list[FunctionCall]) -> list[FunctionResponse]:
        """Send a tool frame and wait for the client's toolResponse."""
        if self._pending is not None and not self._pending.done():
            raise ProtocolError("A tool request is already awaiting its response")

        self._pending = asyncio.get_running_loop().create_future()
        try:
            await self._send(ToolRequestMessage(functions=calls))
            if self.config.tool_response_timeout is not None:
                responses = await asyncio.wait_for(
                    self._pending, timeout=self.config.tool_response_timeout
                )
            else:
                responses = await self._pending
        finally:
            self._pending = None

        if len(responses) != len(calls):
            raise ProtocolError(
                f"Expected {len(calls)} tool response(s), received {len(responses)}"
            )
        return responses

    # ── Incoming frames ───────────────────────────────────────────────────────

    async def handle_frame(self, data: dict) -> None:
        frame = parse_frame(data)

        if isinstance(frame, QueryMessage):
            if self.busy:
                logger.warning("Task already in progress; ignoring query %r", frame.task)
                return
            self._task = asyncio.create_task(self._run_task(frame.task))

        elif isinstance(frame, ToolResponseMessage):
            if self._pending is None or self._pending.done():
                logger.warning("Unexpected toolResponse with no pending tool request")
                return
            try:
                self._pending.set_result(frame.responses())
            except ValueError as exc:
                self._pending.set_exception(ProtocolError(f"Malformed toolResponse: {exc}"))

        else:
            logger.warning("Ignoring %s frame from client", frame.type)

    async def _run_task(self, task: str) -> Optional[str]:
        logger.info("Processing task: %s", task)
        try:
            return await self.application.process_task(task)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # The client waits for a result frame before prompting again
            logger.exception("Task failed: %s", task)
            await self.send_output("result", f"Task failed: {exc}")
            return None

    async def close(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()
        if self.busy:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass


async def websocket_handler(request: web.Request) -> web.WebSocketResponse:
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    app = request.app
    session = BridgeSession(
        ws,
        client_data=app[CLIENT_DATA_KEY],
        config=app[CONFIG_KEY],
        model_resolver=app.get(MODEL_RESOLVER_KEY),
    )
    logger.info("Client connected from %s", request.remote)

    try:
        async for msg in ws:
            if msg.type == WSMsgType.TEXT:
                try:
                    await session.handle_frame(json.loads(msg.data))
                except (ValueError, ProtocolError) as exc:
                    logger.warning("Dropping frame: %s", exc)
            elif msg.type == WSMsgType.ERROR:
                logger.warning("Connection closed with exception %s", ws.exception())
    finally:
        await session.close()
        logger.info("Client disconnected")

    return ws


def create_app(
    client_data: Sequence[str],
    config: Optional[AgentConfiguration] = None,
    model_resolver: Optional[ModelResolver] = None,
) -> web.Application:
    # Fail at startup, not on the first connection
    build_agent_registry(client_data)

    app = web.Application()
    app[CLIENT_DATA_KEY] = list(client_data)
    app[CONFIG_KEY] = config or AgentConfiguration()
    if model_resolver is not None:
        app[MODEL_RESOLVER_KEY] = model_resolver
    app.router.add_get("/", websocket_handler)
    return app


def run_server(client_data: Sequence[str], config: Optional[AgentConfiguration] = None) -> None:
    config = config or AgentConfiguration()
    logger.info("Starting task server on ws://%s:%d", config.server_host, config.server_port)
    web.run_app(
        create_app(client_data, config),
        host=config.server_host,
        port=config.server_port,
        print=None,
    )
