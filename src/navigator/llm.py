"""
llm.py — Model capability boundary.

The router and executor depend only on ``LLMClient``; the Gemini
implementation lives in ``gemini.py`` and tests substitute fakes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from .agents.base import Citation, TurnContext
from .agents.tools import FunctionTool, ToolInvocation, ToolSpec


@dataclass(frozen=True)
class ClassificationResult:
    """Tool names the model selected, in the model's own order."""

    selected_tool_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class GenerationResult:
    text: str = ""
    tool_invocations: tuple[ToolInvocation, ...] = ()
    citations: tuple[Citation, ...] = ()


class LLMClient(ABC):
    """Interface to the language model used for routing and generation.

    Both operations may raise on transport, auth, quota or timeout errors;
    callers own the fail-safe policy.
    """

    @abstractmethod
    def classify(
        self,
        instruction: str,
        tools: Sequence[FunctionTool],
        input_text: str,
        temperature: float,
    ) -> ClassificationResult:
        """Ask the model to pick from ``tools`` for a single input."""

    @abstractmethod
    def generate(
        self,
        instruction: str,
        tools: Sequence[ToolSpec],
        context: TurnContext,
    ) -> GenerationResult:
        """Generate the next agent turn for ``context``."""
