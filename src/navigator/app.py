#!/usr/bin/env python3
"""
app.py — Application entrypoint.

Sets up logging, validates environment, initialises the navigator
components, and starts the Telegram bot.
"""

import logging
import os
import sys

from dotenv import load_dotenv
from telegram.ext import Application, CommandHandler, MessageHandler, filters

from .agents import DEFAULT_REGISTRY, Router, SpecialistExecutor
from .config import ConfigError, Settings, load_settings
from .gemini import GeminiClient
from .listener import handle_message, handle_start
from .orchestrator import Conversation

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)

# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------
load_dotenv()

REQUIRED_ENV = ["TELEGRAM_BOT_TOKEN"]


def _validate_env():
    """Fail fast if any required environment variable is missing.

    GEMINI_API_KEY only triggers a warning: without it every message is
    answered with a notice instead of reaching the model.
    """
    missing = [k for k in REQUIRED_ENV if not os.environ.get(k, "").strip()]
    if missing:
        logging.critical(f"Missing environment variables: {', '.join(missing)}")
        sys.exit(1)
    if not os.environ.get("GEMINI_API_KEY", "").strip():
        logging.warning("GEMINI_API_KEY not set — messages will be rejected")


def build_conversation_factory(settings: Settings):
    """Share one router and executor across all chats' conversations."""
    llm = GeminiClient(settings)
    router = Router(
        llm,
        registry=DEFAULT_REGISTRY,
        default_agent=settings.default_agent,
        temperature=settings.routing_temperature,
    )
    executor = SpecialistExecutor(
        llm,
        registry=DEFAULT_REGISTRY,
        default_format=settings.document_format,
    )

    def factory() -> Conversation:
        return Conversation(router, executor, settings)

    return factory


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main():
    _validate_env()

    try:
        settings = load_settings()
    except ConfigError as e:
        logging.critical("Invalid configuration: %s", e)
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)

    app = Application.builder().token(os.environ["TELEGRAM_BOT_TOKEN"]).build()

    # Store shared objects for handlers to access
    app.bot_data["settings"] = settings
    app.bot_data["conversation_factory"] = build_conversation_factory(settings)

    app.add_handler(CommandHandler("start", handle_start))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_message))

    logging.info("⚡️ Hospital Navigator starting up (Telegram)...")
    app.run_polling()


if __name__ == "__main__":
    main()
