"""
router.py — Intent Router: picks exactly one specialist for a message.

The navigator persona is sent as the system instruction and each
specialist is exposed as a selectable routing tool. The model is expected
to call exactly one of them; anything else (no call, several calls, an
unknown name, or the call failing outright) resolves to the default
specialist so routing always produces an answer.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import AgentIdentity
from .registry import DEFAULT_REGISTRY, AgentRegistry
from .tools import routing_tools

if TYPE_CHECKING:
    from ..llm import LLMClient

DEFAULT_ROUTING_TEMPERATURE = 0.1


class Router:
    """Classifies user text into a specialist ``AgentIdentity``."""

    def __init__(
        self,
        llm: LLMClient,
        registry: AgentRegistry = DEFAULT_REGISTRY,
        default_agent: AgentIdentity = AgentIdentity.PATIENT_INFO,
        temperature: float = DEFAULT_ROUTING_TEMPERATURE,
    ):
        if default_agent is AgentIdentity.NAVIGATOR:
            raise ValueError("The default agent must be a specialist")

        self.llm = llm
        self.registry = registry
        self.default_agent = default_agent
        self.temperature = temperature
        self.tools = routing_tools(registry)
        self._instruction = registry.lookup(AgentIdentity.NAVIGATOR).persona_prompt

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def route(self, user_text: str) -> AgentIdentity:
        """Return the specialist for ``user_text``. Never raises."""
        try:
            result = self.llm.classify(
                self._instruction,
                self.tools,
                user_text,
                self.temperature,
            )
            names = [str(name) for name in result.selected_tool_names or () if name]
        except Exception as e:
            logging.error("Routing error, using %s: %s", self.default_agent.name, e)
            return self.default_agent

        if not names:
            logging.warning(
                "Navigator selected no agent, using %s", self.default_agent.name
            )
            return self.default_agent

        if len(names) > 1:
            logging.warning(
                "Navigator selected %d agents (%s), using the first",
                len(names),
                ", ".join(names),
            )

        identity = self.registry.specialist_for_tool(names[0])
        if identity is None:
            logging.warning(
                "Navigator selected unknown tool %r, using %s",
                names[0],
                self.default_agent.name,
            )
            return self.default_agent

        logging.info("🧭 Routed to %s", identity.name)
        return identity
