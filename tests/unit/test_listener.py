import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

from navigator.agents import (
    DEFAULT_REGISTRY,
    AgentIdentity,
    Citation,
    ConversationMessage,
    Router,
    SpecialistExecutor,
    Speaker,
)
from navigator.agents.registry import WELCOME_TEXT
from navigator.config import Settings
from navigator.listener import format_reply, handle_message, handle_start, split_reply
from navigator.llm import GenerationResult
from navigator.orchestrator import NOTICE_MISSING_CREDENTIAL, Conversation


def test_format_reply_with_document_and_sources():
    message = ConversationMessage(
        speaker=Speaker.AGENT,
        text="Berikut fakturnya.",
        producing_agent=AgentIdentity.BILLING,
        citations=(Citation("BPJS", "https://bpjs.example"),),
        generated_artifact_name="Faktur.pdf",
    )
    reply = format_reply(message, DEFAULT_REGISTRY)

    assert reply.startswith("🩺 Keuangan & Asuransi\n")
    assert "*" not in reply
    assert "Faktur.pdf" in reply
    assert "1. BPJS — https://bpjs.example" in reply


def test_format_reply_for_system_error():
    message = ConversationMessage(speaker=Speaker.SYSTEM_ERROR, text="Maaf")
    assert format_reply(message, DEFAULT_REGISTRY) == "⚠️ Maaf"


def _telegram(text, settings, llm, user_id=7):
    def factory():
        return Conversation(Router(llm), SpecialistExecutor(llm), settings)

    message = SimpleNamespace(text=text, reply_text=AsyncMock())
    update = SimpleNamespace(message=message, effective_user=SimpleNamespace(id=user_id))
    context = SimpleNamespace(
        bot_data={"settings": settings, "conversation_factory": factory},
        chat_data={},
    )
    return update, context


def test_handle_message_replies_with_agent_message(settings, make_llm):
    llm = make_llm(
        selected=["Appointment_Scheduler"],
        generation=GenerationResult(text="Janji temu terjadwal."),
    )
    update, context = _telegram("Saya mau janji dengan dokter", settings, llm)

    asyncio.run(handle_message(update, context))

    update.message.reply_text.assert_awaited_once()
    reply = update.message.reply_text.await_args.args[0]
    assert "Jadwal Temu" in reply
    assert "Janji temu terjadwal." in reply
    conversation = context.chat_data["conversation"]
    assert conversation.messages[-1].producing_agent is AgentIdentity.APPOINTMENT


def test_handle_message_replies_with_notice(make_llm):
    update, context = _telegram("halo", Settings(api_key=None), make_llm())

    asyncio.run(handle_message(update, context))

    update.message.reply_text.assert_awaited_once_with(NOTICE_MISSING_CREDENTIAL)


def test_unlisted_user_is_ignored(make_llm):
    settings = Settings(api_key="k", allowed_users=frozenset({"1"}))
    llm = make_llm()
    update, context = _telegram("halo", settings, llm, user_id=2)

    asyncio.run(handle_message(update, context))

    update.message.reply_text.assert_not_awaited()
    assert llm.classify_calls == []


def test_start_resets_conversation(settings, make_llm):
    update, context = _telegram("/start", settings, make_llm())
    old = context.bot_data["conversation_factory"]()
    context.chat_data["conversation"] = old

    asyncio.run(handle_start(update, context))

    update.message.reply_text.assert_awaited_once_with(WELCOME_TEXT)
    assert context.chat_data["conversation"] is not old
    old.submit_user_message("halo")
    assert len(old.messages) == 1


def test_welcome_text_has_no_bold_markup():
    assert "**" not in WELCOME_TEXT


def test_split_reply_keeps_short_text_whole():
    assert split_reply("halo") == ["halo"]
    assert split_reply("") == [""]


def test_split_reply_prefers_line_breaks():
    text = "a" * 6 + "\n" + "b" * 6
    assert split_reply(text, limit=10) == ["aaaaaa", "bbbbbb"]


def test_split_reply_cuts_long_lines():
    chunks = split_reply("x" * 25, limit=10)
    assert chunks == ["x" * 10, "x" * 10, "x" * 5]


def test_long_agent_reply_is_sent_in_chunks(settings, make_llm):
    long_text = "\n".join(["Jadwal dokter tersedia setiap hari kerja."] * 200)
    llm = make_llm(
        selected=["Appointment_Scheduler"],
        generation=GenerationResult(text=long_text),
    )
    update, context = _telegram("jadwal dokter", settings, llm)

    asyncio.run(handle_message(update, context))

    sent = [call.args[0] for call in update.message.reply_text.await_args_list]
    assert len(sent) > 1
    assert all(len(chunk) <= 4096 for chunk in sent)
    assert "".join(sent).count("Jadwal dokter tersedia") == 200
