"""
specialist.py — Specialist Executor: runs one agent and normalises its output.

The agent's persona is the system instruction, its tools come from its
capability flags, and the built ``TurnContext`` is the conversation. The raw
model result (text, ``generate_document`` calls, search citations) is folded
into a single ``ExecutionOutcome``. Failures never escape: they become a
fixed apology.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .base import AgentIdentity, Citation, ExecutionOutcome, TurnContext
from .registry import DEFAULT_REGISTRY, AgentRegistry
from .tools import (
    DEFAULT_DOCUMENT_FORMAT,
    GenerateDocumentCall,
    artifact_name,
    decode_invocation,
    tools_for,
)

if TYPE_CHECKING:
    from ..llm import GenerationResult, LLMClient

APOLOGY_TEXT = "Maaf, saya mengalami kesulitan memproses permintaan Anda saat ini."


class EmptyResponseError(Exception):
    """The model returned neither text nor a usable tool call."""


class SpecialistExecutor:
    """Invokes specialists end to end."""

    def __init__(
        self,
        llm: LLMClient,
        registry: AgentRegistry = DEFAULT_REGISTRY,
        default_format: str = DEFAULT_DOCUMENT_FORMAT,
    ):
        self.llm = llm
        self.registry = registry
        self.default_format = default_format

    # ------------------------------------------------------------------
    # Public
    # ------------------------------------------------------------------

    def execute(self, identity: AgentIdentity, context: TurnContext) -> ExecutionOutcome:
        """Run ``identity`` on ``context``. Never raises."""
        try:
            definition = self.registry.lookup(identity)
            result = self.llm.generate(
                definition.persona_prompt,
                tools_for(definition),
                context,
            )
            outcome = self._normalise(result)
        except Exception as e:
            logging.error("Agent %s error: %s", identity.name, e)
            return ExecutionOutcome(text=APOLOGY_TEXT)

        logging.info(
            "🩺 %s replied: %d chars, %d citation(s), document=%s",
            identity.name,
            len(outcome.text),
            len(outcome.citations),
            outcome.generated_artifact_name,
        )
        return outcome

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _normalise(self, result: GenerationResult) -> ExecutionOutcome:
        text = (result.text or "").strip()

        documents = [
            call
            for call in (
                decode_invocation(inv, self.default_format)
                for inv in result.tool_invocations
            )
            if isinstance(call, GenerateDocumentCall)
        ]
        if len(documents) > 1:
            # Only one document surfaces per turn.
            logging.warning(
                "%d documents requested in one turn, keeping the last", len(documents)
            )

        generated = None
        if documents:
            document = documents[-1]
            generated = artifact_name(document)
            if not text:
                text = self._confirmation(document)

        if not text:
            raise EmptyResponseError("Model returned an empty response")

        return ExecutionOutcome(
            text=text,
            citations=self._flatten_citations(result.citations),
            generated_artifact_name=generated,
        )

    @staticmethod
    def _confirmation(document: GenerateDocumentCall) -> str:
        return (
            f"Saya telah membuat dokumen {document.document_type} "
            f"({document.format.upper()}) untuk Anda. "
            "Silakan unduh di bawah ini."
        )

    @staticmethod
    def _flatten_citations(citations) -> tuple[Citation, ...]:
        """Keep citations that carry a URL, in their original order."""
        flattened = []
        for citation in citations or ():
            if not citation.url:
                continue
            flattened.append(Citation(title=citation.title or citation.url, url=citation.url))
        return tuple(flattened)
