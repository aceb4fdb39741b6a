from __future__ import annotations

from types import SimpleNamespace

import pytest

from navigator.agents import ConversationMessage, Speaker
from navigator.config import Settings
from navigator.llm import ClassificationResult, GenerationResult, LLMClient


class FakeLLM(LLMClient):
    """Scripted stand-in for the Gemini client that records every call."""

    def __init__(
        self,
        selected=("Patient_Information_Agent",),
        generation: GenerationResult | None = None,
        classify_error: Exception | None = None,
        generate_error: Exception | None = None,
    ) -> None:
        self.selected = tuple(selected)
        self.generation = generation or GenerationResult(text="Baik, saya bantu.")
        self.classify_error = classify_error
        self.generate_error = generate_error
        self.classify_calls: list[dict] = []
        self.generate_calls: list[dict] = []

    def classify(self, instruction, tools, input_text, temperature):
        self.classify_calls.append(
            {
                "instruction": instruction,
                "tools": list(tools),
                "input_text": input_text,
                "temperature": temperature,
            }
        )
        if self.classify_error is not None:
            raise self.classify_error
        return ClassificationResult(selected_tool_names=self.selected)

    def generate(self, instruction, tools, context):
        self.generate_calls.append(
            {"instruction": instruction, "tools": list(tools), "context": context}
        )
        if self.generate_error is not None:
            raise self.generate_error
        return self.generation


@pytest.fixture
def make_llm():
    return FakeLLM


@pytest.fixture
def settings():
    return Settings(api_key="test-key")


def user(text: str) -> ConversationMessage:
    return ConversationMessage(speaker=Speaker.USER, text=text)


def agent(text: str, producing_agent=None) -> ConversationMessage:
    return ConversationMessage(speaker=Speaker.AGENT, text=text, producing_agent=producing_agent)


def system_error(text: str = "boom") -> ConversationMessage:
    return ConversationMessage(speaker=Speaker.SYSTEM_ERROR, text=text)


@pytest.fixture
def msg():
    """Message builders: ``msg.user``, ``msg.agent``, ``msg.system_error``."""
    return SimpleNamespace(user=user, agent=agent, system_error=system_error)
