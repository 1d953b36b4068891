"""
Model-tier resolver.

Every agent, the planner and the solver are served by one of two tiers
(fast / strong). The concrete model names come from AgentConfiguration.
"""

from __future__ import annotations

import os
from typing import Callable, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI

from task_graph.configuration import AgentConfiguration
from task_graph.schemas import ModelTier

ModelResolver = Callable[[ModelTier], BaseChatModel]


def get_chat_model(tier: ModelTier, cfg: Optional[AgentConfiguration] = None) -> ChatOpenAI:
    cfg = cfg or AgentConfiguration()
    return ChatOpenAI(
        model=cfg.model_name_for(tier),
        api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
        base_url=cfg.api_base_url,
        temperature=cfg.temperature,
    )


def make_model_resolver(cfg: Optional[AgentConfiguration] = None) -> ModelResolver:
    """Return a resolver that builds each tier's model once and reuses it."""
    cfg = cfg or AgentConfiguration()
    cache: dict[ModelTier, BaseChatModel] = {}

    def resolve(tier: ModelTier) -> BaseChatModel:
        if tier not in cache:
            cache[tier] = get_chat_model(tier, cfg)
        return cache[tier]

    return resolve
