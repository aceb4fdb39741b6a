"""
listener.py — Telegram message handlers.

Each chat gets its own Conversation. Incoming text is submitted to it and
every agent/system-error message or notice it produces during the turn is
sent back as a reply.
"""

import logging

from telegram import Update
from telegram.constants import MessageLimit
from telegram.ext import ContextTypes

from .agents import AgentRegistry, ConversationMessage, Speaker
from .agents.registry import WELCOME_TEXT
from .config import Settings
from .orchestrator import Conversation, MessageAppended, NoticeRaised


def format_reply(message: ConversationMessage, registry: AgentRegistry) -> str:
    """Render a conversation message as Telegram text.

    Agent replies are prefixed with the specialist's display name and
    followed by any generated document and cited sources.
    """
    if message.speaker is Speaker.SYSTEM_ERROR or message.producing_agent is None:
        return f"⚠️ {message.text}"

    definition = registry.lookup(message.producing_agent)
    lines = [f"🩺 {definition.display_name}", message.text]

    if message.generated_artifact_name:
        lines.append(f"\n📄 Dokumen: {message.generated_artifact_name}")

    if message.citations:
        lines.append("\nSumber:")
        for i, citation in enumerate(message.citations, 1):
            lines.append(f"  {i}. {citation.title} — {citation.url}")

    return "\n".join(lines)


def split_reply(text: str, limit: int = MessageLimit.MAX_TEXT_LENGTH) -> list[str]:
    """Split ``text`` into Telegram-sized chunks, preferring line breaks."""
    chunks = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text or not chunks:
        chunks.append(text)
    return chunks


def _get_conversation(context: ContextTypes.DEFAULT_TYPE) -> Conversation:
    """Return this chat's conversation, creating it on first use."""
    conversation = context.chat_data.get("conversation")
    if conversation is None:
        conversation = context.bot_data["conversation_factory"]()
        context.chat_data["conversation"] = conversation
    return conversation


async def handle_start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Greet the user and start a fresh conversation for this chat."""
    if not update.message:
        return

    previous = context.chat_data.pop("conversation", None)
    if previous is not None:
        previous.close()
    _get_conversation(context)

    await update.message.reply_text(WELCOME_TEXT)


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Main Telegram message handler.

    Validates the sender, submits the text to the chat's conversation and
    replies with whatever the turn produced.
    """
    message = update.message
    if not message or not message.text:
        return

    settings: Settings = context.bot_data["settings"]

    # Security: reject messages from users not in the allowlist
    user_id = str(update.effective_user.id) if update.effective_user else ""
    if settings.allowed_users and user_id not in settings.allowed_users:
        logging.warning("Rejected message from unlisted user %s", user_id)
        return

    conversation = _get_conversation(context)
    registry = conversation.router.registry

    replies: list[str] = []

    def collect(event) -> None:
        if isinstance(event, NoticeRaised):
            replies.append(event.text)
        elif isinstance(event, MessageAppended) and event.message.speaker is not Speaker.USER:
            replies.append(format_reply(event.message, registry))

    unsubscribe = conversation.subscribe(collect)
    try:
        conversation.submit_user_message(message.text)
    finally:
        unsubscribe()

    for reply in replies:
        for chunk in split_reply(reply):
            await message.reply_text(chunk)
