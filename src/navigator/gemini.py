"""
gemini.py — ``LLMClient`` implementation backed by Google Gemini.

Routing tools and ``generate_document`` are sent as function
declarations, search as the built-in Google Search grounding tool. The SDK
client is created on first use so the process can start without a key;
a missing key then fails the call like any other transport error.
"""

from __future__ import annotations

import logging
from typing import Sequence

from google import genai
from google.genai import types

from .agents.base import Citation, TurnContext
from .agents.tools import FunctionTool, SearchTool, ToolInvocation, ToolSpec
from .config import Settings
from .llm import ClassificationResult, GenerationResult, LLMClient

_ROLES = {"user": "user", "agent": "model"}


class GeminiClient(LLMClient):
    """Classifies and generates with ``google-genai``."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self._client: genai.Client | None = None

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def classify(
        self,
        instruction: str,
        tools: Sequence[FunctionTool],
        input_text: str,
        temperature: float,
    ) -> ClassificationResult:
        config = types.GenerateContentConfig(
            system_instruction=instruction,
            tools=_to_gemini_tools(tools),
            temperature=temperature,
        )
        response = self._get_client().models.generate_content(
            model=self.settings.routing_model,
            contents=input_text,
            config=config,
        )
        names = tuple(call.name for call in response.function_calls or [] if call.name)
        logging.info("Navigator classification: %s", ", ".join(names) or "(none)")
        return ClassificationResult(selected_tool_names=names)

    def generate(
        self,
        instruction: str,
        tools: Sequence[ToolSpec],
        context: TurnContext,
    ) -> GenerationResult:
        config = types.GenerateContentConfig(
            system_instruction=instruction,
            tools=_to_gemini_tools(tools) or None,
        )
        response = self._get_client().models.generate_content(
            model=self.settings.agent_model,
            contents=_to_contents(context),
            config=config,
        )

        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            logging.info("Gemini generation: %s tokens", usage.total_token_count)

        return GenerationResult(
            text=_response_text(response),
            tool_invocations=tuple(
                ToolInvocation(name=call.name, arguments=dict(call.args or {}))
                for call in response.function_calls or []
                if call.name
            ),
            citations=_citations(response),
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.settings.has_credential:
                raise RuntimeError("GEMINI_API_KEY not set")
            self._client = genai.Client(
                api_key=self.settings.api_key,
                http_options=types.HttpOptions(
                    timeout=int(self.settings.request_timeout * 1000)
                ),
            )
        return self._client


def _to_gemini_tools(tools: Sequence[ToolSpec]) -> list[types.Tool]:
    """Group function tools into one declaration block; search stands alone."""
    gemini_tools: list[types.Tool] = []
    declarations = []
    for tool in tools:
        if isinstance(tool, SearchTool):
            gemini_tools.append(types.Tool(google_search=types.GoogleSearch()))
        elif isinstance(tool, FunctionTool):
            declarations.append(
                types.FunctionDeclaration(
                    name=tool.name,
                    description=tool.description,
                    parameters=dict(tool.parameters),
                )
            )
    if declarations:
        gemini_tools.append(types.Tool(function_declarations=declarations))
    return gemini_tools


def _to_contents(context: TurnContext) -> list[types.Content]:
    return [
        types.Content(role=_ROLES[turn.role], parts=[types.Part(text=turn.text)])
        for turn in context
    ]


def _response_text(response) -> str:
    """Concatenate text parts of the first candidate, skipping thoughts."""
    if not response.candidates or not response.candidates[0].content:
        return ""
    text = ""
    for part in response.candidates[0].content.parts or []:
        if getattr(part, "thought", False):
            continue
        text += getattr(part, "text", "") or ""
    return text


def _citations(response) -> tuple[Citation, ...]:
    if not response.candidates:
        return ()
    metadata = getattr(response.candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []
    citations = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is None:
            continue
        citations.append(Citation(title=web.title or "", url=web.uri))
    return tuple(citations)
