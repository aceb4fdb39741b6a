"""
base.py — Core data model shared by the router, executor and orchestrator.

Agents are identified by ``AgentIdentity`` and described by an
``AgentDefinition``. The orchestrator records the conversation as
``ConversationMessage`` objects; the executor sees only a bounded
``TurnContext`` built from them and answers with an ``ExecutionOutcome``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class AgentIdentity(Enum):
    """Closed set of agents: the navigator plus its specialists."""

    NAVIGATOR = "NAVIGATOR"
    PATIENT_INFO = "PATIENT_INFO"
    APPOINTMENT = "APPOINTMENT"
    MEDICAL_RECORDS = "MEDICAL_RECORDS"
    BILLING = "BILLING"

    @classmethod
    def specialists(cls) -> tuple[AgentIdentity, ...]:
        return tuple(member for member in cls if member is not cls.NAVIGATOR)


class Capability(Enum):
    SEARCH = "search"
    DOCUMENT_GENERATION = "document-generation"


class Speaker(Enum):
    USER = "user"
    AGENT = "agent"
    SYSTEM_ERROR = "system-error"


@dataclass(frozen=True)
class AgentDefinition:
    """Static description of one agent.

    ``persona_prompt`` is the full behavioural contract sent as the system
    instruction. ``tool_name`` is the name of the routing tool the navigator
    selects to reach this agent (``None`` for the navigator itself).
    """

    identity: AgentIdentity
    display_name: str
    role: str
    description: str
    persona_prompt: str
    tool_name: str | None = None
    capabilities: frozenset[Capability] = frozenset()


@dataclass(frozen=True)
class Citation:
    """A web source the model grounded its answer on."""

    title: str
    url: str | None = None


@dataclass(frozen=True)
class ConversationMessage:
    """One entry in the append-only conversation log."""

    speaker: Speaker
    text: str
    producing_agent: AgentIdentity | None = None
    citations: tuple[Citation, ...] = ()
    generated_artifact_name: str | None = None
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc)
    )


@dataclass(frozen=True)
class Turn:
    """A role-normalised conversation turn ('user' or 'agent')."""

    role: str
    text: str


@dataclass(frozen=True)
class TurnContext:
    """Bounded view of the conversation handed to a specialist.

    The new user message is always the last turn.
    """

    turns: tuple[Turn, ...]

    def __len__(self) -> int:
        return len(self.turns)

    def __iter__(self):
        return iter(self.turns)

    @property
    def last(self) -> Turn:
        return self.turns[-1]


@dataclass(frozen=True)
class ExecutionOutcome:
    """Normalised result of one specialist invocation."""

    text: str
    citations: tuple[Citation, ...] = ()
    generated_artifact_name: str | None = None
