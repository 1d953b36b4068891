import os
from dataclasses import dataclass, field
from typing import Optional

from task_graph.schemas import ModelTier


def _optional_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


@dataclass(kw_only=True)
class AgentConfiguration:
    """Runtime configuration for the graph, the server and the client bridge."""

    fast_model_name: str = field(
        default_factory=lambda: os.getenv("FAST_MODEL", "gpt-4o-mini")
    )
    strong_model_name: str = field(
        default_factory=lambda: os.getenv("STRONG_MODEL", "gpt-4o")
    )
    api_base_url: Optional[str] = field(
        default_factory=lambda: os.getenv("LLM_API_BASE_URL")
    )
    planner_tier: ModelTier = ModelTier.FAST
    solver_tier: ModelTier = ModelTier.STRONG
    temperature: float = 0.0
    recursion_limit: int = 50

    server_host: str = field(default_factory=lambda: os.getenv("TASK_GRAPH_HOST", "localhost"))
    server_port: int = field(default_factory=lambda: int(os.getenv("TASK_GRAPH_PORT", "8080")))
    server_url: str = field(
        default_factory=lambda: os.getenv("TASK_GRAPH_URL", "ws://localhost:8080")
    )
    reconnect_delay: float = field(
        default_factory=lambda: float(os.getenv("RECONNECT_DELAY", "5.0"))
    )
    tool_response_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("TOOL_RESPONSE_TIMEOUT")
    )
    task_timeout: Optional[float] = field(
        default_factory=lambda: _optional_float("TASK_TIMEOUT")
    )

    def model_name_for(self, tier: ModelTier) -> str:
        return self.strong_model_name if tier is ModelTier.STRONG else self.fast_model_name

