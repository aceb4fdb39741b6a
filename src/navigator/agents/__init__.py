"""
agents — Navigator and specialist agents for the hospital assistant.

A message is handled in two phases:
1. The Router asks the navigator persona to pick one specialist via the
   routing tools built from the registry.
2. The SpecialistExecutor runs that specialist on a bounded TurnContext
   with the tools its capabilities allow.

To add a specialist, add a member to AgentIdentity and its AgentDefinition
to the registry; the routing tool is derived from the definition, so the
navigator can reach it immediately.
"""

from .base import (
    AgentDefinition,
    AgentIdentity,
    Capability,
    Citation,
    ConversationMessage,
    ExecutionOutcome,
    Speaker,
    Turn,
    TurnContext,
)
from .context import build_turn_context
from .registry import DEFAULT_REGISTRY, AgentRegistry, RegistryError
from .router import Router
from .specialist import SpecialistExecutor

__all__ = [
    "AgentDefinition",
    "AgentIdentity",
    "AgentRegistry",
    "Capability",
    "Citation",
    "ConversationMessage",
    "DEFAULT_REGISTRY",
    "ExecutionOutcome",
    "RegistryError",
    "Router",
    "SpecialistExecutor",
    "Speaker",
    "Turn",
    "TurnContext",
    "build_turn_context",
]
