"""
orchestrator.py — Drives one conversation turn by turn.

Each turn moves IDLE -> ROUTING -> EXECUTING -> IDLE. The Router and
SpecialistExecutor never raise, so a turn normally ends with an agent
message; anything that still escapes is recorded as a single system-error
message and the conversation stays usable.

Observers (e.g. the Telegram listener) subscribe to events instead of
polling: MessageAppended, PhaseChanged, ActiveAgentChanged and NoticeRaised.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from .agents import (
    AgentDefinition,
    AgentIdentity,
    ConversationMessage,
    Router,
    SpecialistExecutor,
    Speaker,
    build_turn_context,
)
from .agents.registry import WELCOME_TEXT
from .config import Settings

SYSTEM_ERROR_TEXT = "Maaf, terjadi kesalahan koneksi ke layanan AI."

NOTICE_MISSING_CREDENTIAL = (
    "API Key is missing. Please set the GEMINI_API_KEY environment variable."
)
NOTICE_EMPTY_MESSAGE = "Pesan kosong. Silakan ketik pertanyaan Anda."
NOTICE_BUSY = "Permintaan sebelumnya masih diproses. Mohon tunggu sebentar."
NOTICE_CLOSED = "Percakapan ini sudah ditutup."


class Phase(Enum):
    IDLE = "idle"
    ROUTING = "routing"
    EXECUTING = "executing"


@dataclass(frozen=True)
class MessageAppended:
    message: ConversationMessage


@dataclass(frozen=True)
class PhaseChanged:
    phase: Phase


@dataclass(frozen=True)
class ActiveAgentChanged:
    agent: AgentIdentity


@dataclass(frozen=True)
class NoticeRaised:
    """A user-facing notice for a rejected message; nothing was appended."""

    text: str


ConversationEvent = Union[MessageAppended, PhaseChanged, ActiveAgentChanged, NoticeRaised]
Listener = Callable[[ConversationEvent], None]


class Conversation:
    """Owns the message history and runs the two-phase protocol.

    Only one turn may be in flight; a message submitted while a turn is
    running is rejected with a notice.
    """

    def __init__(
        self,
        router: Router,
        executor: SpecialistExecutor,
        settings: Settings,
        welcome: bool = True,
    ):
        self.router = router
        self.executor = executor
        self.settings = settings

        self._messages: list[ConversationMessage] = []
        self._phase = Phase.IDLE
        self._active_agent = AgentIdentity.NAVIGATOR
        self._listeners: list[Listener] = []
        self._turn_lock = threading.Lock()
        self._closed = False

        if welcome:
            self._messages.append(
                ConversationMessage(
                    speaker=Speaker.AGENT,
                    text=WELCOME_TEXT,
                    producing_agent=AgentIdentity.NAVIGATOR,
                )
            )

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def messages(self) -> tuple[ConversationMessage, ...]:
        return tuple(self._messages)

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def active_agent(self) -> AgentIdentity:
        return self._active_agent

    @property
    def active_definition(self) -> AgentDefinition:
        return self.router.registry.lookup(self._active_agent)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop accepting messages; an in-flight turn appends nothing more."""
        self._closed = True

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def submit_user_message(self, text: str) -> None:
        """Process one user turn. Rejected messages only raise a notice."""
        if self._closed:
            self._reject(NOTICE_CLOSED)
            return
        if not text or not text.strip():
            self._reject(NOTICE_EMPTY_MESSAGE)
            return
        if not self.settings.has_credential:
            self._reject(NOTICE_MISSING_CREDENTIAL)
            return
        if not self._turn_lock.acquire(blocking=False):
            self._reject(NOTICE_BUSY)
            return

        try:
            self._run_turn(text)
        except Exception:
            logging.exception("Unhandled error during conversation turn")
            self._append(
                ConversationMessage(speaker=Speaker.SYSTEM_ERROR, text=SYSTEM_ERROR_TEXT)
            )
        finally:
            self._set_phase(Phase.IDLE)
            self._turn_lock.release()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _run_turn(self, text: str) -> None:
        self._set_active_agent(AgentIdentity.NAVIGATOR)
        self._set_phase(Phase.ROUTING)

        history = list(self._messages)
        self._append(ConversationMessage(speaker=Speaker.USER, text=text))
        logging.info("📥 Incoming: %s...", text[:60])

        target = self.router.route(text)
        self._set_active_agent(target)
        self._set_phase(Phase.EXECUTING)

        context = build_turn_context(history, text, self.settings.context_window)
        outcome = self.executor.execute(target, context)

        if self._closed:
            logging.info("Conversation closed mid-turn, dropping %s reply", target.name)
            return

        self._append(
            ConversationMessage(
                speaker=Speaker.AGENT,
                text=outcome.text,
                producing_agent=target,
                citations=outcome.citations,
                generated_artifact_name=outcome.generated_artifact_name,
            )
        )

    def _reject(self, notice: str) -> None:
        logging.info("Message rejected: %s", notice)
        self._emit(NoticeRaised(notice))

    def _append(self, message: ConversationMessage) -> None:
        if self._closed:
            return
        self._messages.append(message)
        self._emit(MessageAppended(message))

    def _set_phase(self, phase: Phase) -> None:
        if phase is self._phase:
            return
        self._phase = phase
        self._emit(PhaseChanged(phase))

    def _set_active_agent(self, agent: AgentIdentity) -> None:
        if agent is self._active_agent:
            return
        self._active_agent = agent
        self._emit(ActiveAgentChanged(agent))

    def _emit(self, event: ConversationEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logging.exception("Listener failed on %s", type(event).__name__)
