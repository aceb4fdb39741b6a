"""
context.py — Builds the bounded conversation view sent to a specialist.
"""

from __future__ import annotations

from typing import Sequence

from .base import ConversationMessage, Speaker, Turn, TurnContext

DEFAULT_CONTEXT_WINDOW = 6


def build_turn_context(
    history: Sequence[ConversationMessage],
    new_user_text: str,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> TurnContext:
    """Convert recent history plus the new message into a ``TurnContext``.

    System-error messages are dropped before windowing. Agent messages keep
    the 'agent' role whichever specialist wrote them, so a newly routed
    agent sees what the previous one said.

    Args:
        history: Conversation so far, oldest first, without the new message.
        new_user_text: The message being answered; always the last turn.
        window: Maximum number of prior messages to keep.
    """
    if window < 0:
        raise ValueError(f"Context window must be >= 0, got {window}")

    conversational = [m for m in history if m.speaker is not Speaker.SYSTEM_ERROR]
    recent = conversational[-window:] if window else []

    turns = [
        Turn(role="user" if m.speaker is Speaker.USER else "agent", text=m.text)
        for m in recent
    ]
    turns.append(Turn(role="user", text=new_user_text))
    return TurnContext(turns=tuple(turns))
