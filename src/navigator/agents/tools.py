"""
tools.py — Declarative tool catalog and typed decoding of tool calls.

Two kinds of tools exist: function tools the model can call by name
(the navigator's routing tools and the specialists' ``generate_document``)
and the search-grounding capability. Tool calls come back from the model as
loose ``name`` + ``arguments`` bags; ``decode_invocation`` turns them into a
typed variant per tool, falling back to defaults for missing or wrong-typed
fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Union

from .base import AgentDefinition, Capability
from .registry import AgentRegistry

DEFAULT_DOCUMENT_TYPE = "Dokumen"
DEFAULT_DOCUMENT_FORMAT = "PDF"


@dataclass(frozen=True)
class FunctionTool:
    """A callable action described by name, description and argument schema."""

    name: str
    description: str
    parameters: Mapping[str, Any] = field(
        default_factory=lambda: {"type": "OBJECT", "properties": {}}
    )


@dataclass(frozen=True)
class SearchTool:
    """Web search grounding; the model decides when to search."""

    name: str = "google_search"


ToolSpec = Union[FunctionTool, SearchTool]


@dataclass(frozen=True)
class ToolInvocation:
    """A raw tool call as returned by the model."""

    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)


WEB_SEARCH_TOOL = SearchTool()

GENERATE_DOCUMENT_TOOL = FunctionTool(
    name="generate_document",
    description=(
        "Membuat dokumen resmi (PDF/Formulir) untuk pengguna seperti rekam "
        "medis atau faktur."
    ),
    parameters={
        "type": "OBJECT",
        "properties": {
            "documentType": {
                "type": "STRING",
                "description": (
                    "Jenis dokumen (misal: Faktur, Rekam Medis, Formulir Pendaftaran)"
                ),
            },
            "format": {
                "type": "STRING",
                "description": "Format file (PDF, DOCX)",
            },
        },
        "required": ["documentType"],
    },
)


def routing_tools(registry: AgentRegistry) -> tuple[FunctionTool, ...]:
    """One selectable delegation tool per specialist, in registry order."""
    return tuple(
        FunctionTool(name=definition.tool_name, description=definition.description)
        for definition in registry.specialists()
    )


def tools_for(definition: AgentDefinition) -> tuple[ToolSpec, ...]:
    """Build the tool set an agent may use from its capability flags only."""
    tools: list[ToolSpec] = []
    if Capability.SEARCH in definition.capabilities:
        tools.append(WEB_SEARCH_TOOL)
    if Capability.DOCUMENT_GENERATION in definition.capabilities:
        tools.append(GENERATE_DOCUMENT_TOOL)
    return tuple(tools)


# ---------------------------------------------------------------------------
# Typed tool calls
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerateDocumentCall:
    document_type: str
    format: str


@dataclass(frozen=True)
class UnknownToolCall:
    name: str


ToolCall = Union[GenerateDocumentCall, UnknownToolCall]


def _string_arg(arguments: Mapping[str, Any], key: str, default: str) -> str:
    value = arguments.get(key)
    if not isinstance(value, str) or not value.strip():
        return default
    return value.strip()


def decode_invocation(
    invocation: ToolInvocation,
    default_format: str = DEFAULT_DOCUMENT_FORMAT,
) -> ToolCall:
    """Decode a raw invocation into its typed variant."""
    arguments = invocation.arguments if isinstance(invocation.arguments, Mapping) else {}

    if invocation.name == GENERATE_DOCUMENT_TOOL.name:
        doc_format = _string_arg(arguments, "format", default_format).lstrip(".")
        return GenerateDocumentCall(
            document_type=_string_arg(arguments, "documentType", DEFAULT_DOCUMENT_TYPE),
            format=doc_format or default_format,
        )
    return UnknownToolCall(name=invocation.name)


def artifact_name(call: GenerateDocumentCall) -> str:
    """File name for a generated document, e.g. ``Invoice.pdf``."""
    return f"{call.document_type}.{call.format.lower()}"
