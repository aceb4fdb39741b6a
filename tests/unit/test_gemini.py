from types import SimpleNamespace

import pytest

from navigator import gemini
from navigator.agents import Citation, DEFAULT_REGISTRY, build_turn_context
from navigator.agents.tools import (
    GENERATE_DOCUMENT_TOOL,
    WEB_SEARCH_TOOL,
    ToolInvocation,
    routing_tools,
)
from navigator.config import Settings
from navigator.gemini import GeminiClient


class FakeGenaiClient:
    instances: list = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.calls = []
        self.response = None
        self.models = SimpleNamespace(generate_content=self._generate_content)
        FakeGenaiClient.instances.append(self)

    def _generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return self.response


@pytest.fixture
def fake_genai(monkeypatch):
    FakeGenaiClient.instances = []
    monkeypatch.setattr(gemini.genai, "Client", FakeGenaiClient)
    return FakeGenaiClient


def _client(response, settings=None):
    client = GeminiClient(settings or Settings(api_key="k", request_timeout=5))
    sdk = client._get_client()
    sdk.response = response
    return client, sdk


def test_classify_returns_selected_names(fake_genai):
    response = SimpleNamespace(
        function_calls=[
            SimpleNamespace(name="Appointment_Scheduler", args={}),
            SimpleNamespace(name="Billing_And_Insurance_Agent", args={}),
        ],
        candidates=[],
    )
    client, sdk = _client(response)
    tools = routing_tools(DEFAULT_REGISTRY)

    result = client.classify("navigate", tools, "jadwal dokter", 0.1)

    assert result.selected_tool_names == ("Appointment_Scheduler", "Billing_And_Insurance_Agent")
    call = sdk.calls[0]
    assert call["model"] == "gemini-2.5-flash"
    assert call["contents"] == "jadwal dokter"
    assert call["config"].temperature == 0.1
    assert call["config"].system_instruction == "navigate"
    declared = [d.name for d in call["config"].tools[0].function_declarations]
    assert declared == [t.name for t in tools]


def test_classify_without_calls(fake_genai):
    client, _ = _client(SimpleNamespace(function_calls=None, candidates=[]))
    assert client.classify("n", routing_tools(DEFAULT_REGISTRY), "x", 0.1).selected_tool_names == ()


def test_generate_maps_text_calls_and_citations(fake_genai):
    response = SimpleNamespace(
        function_calls=[SimpleNamespace(name="generate_document", args={"documentType": "Faktur"})],
        usage_metadata=SimpleNamespace(total_token_count=42),
        candidates=[
            SimpleNamespace(
                content=SimpleNamespace(
                    parts=[
                        SimpleNamespace(text="thinking...", thought=True),
                        SimpleNamespace(text="Berikut ", thought=None),
                        SimpleNamespace(text="fakturnya.", thought=None),
                        SimpleNamespace(text=None, thought=None),
                    ]
                ),
                grounding_metadata=SimpleNamespace(
                    grounding_chunks=[
                        SimpleNamespace(web=SimpleNamespace(title="BPJS", uri="https://bpjs.example")),
                        SimpleNamespace(web=None),
                    ]
                ),
            )
        ],
    )
    client, sdk = _client(response)
    context = build_turn_context([], "tagihan saya")

    result = client.generate("billing", [WEB_SEARCH_TOOL, GENERATE_DOCUMENT_TOOL], context)

    assert result.text == "Berikut fakturnya."
    assert result.tool_invocations == (
        ToolInvocation("generate_document", {"documentType": "Faktur"}),
    )
    assert result.citations == (Citation("BPJS", "https://bpjs.example"),)

    config = sdk.calls[0]["config"]
    assert config.tools[0].google_search is not None
    assert config.tools[1].function_declarations[0].name == "generate_document"
    contents = sdk.calls[0]["contents"]
    assert [c.role for c in contents] == ["user"]
    assert contents[0].parts[0].text == "tagihan saya"


def test_generate_without_tools_sends_none(fake_genai, msg):
    response = SimpleNamespace(function_calls=None, candidates=[], usage_metadata=None)
    client, sdk = _client(response)
    context = build_turn_context([msg.user("a"), msg.agent("b")], "c")

    result = client.generate("plain", [], context)

    assert result.text == ""
    assert result.citations == ()
    assert sdk.calls[0]["config"].tools is None
    assert [c.role for c in sdk.calls[0]["contents"]] == ["user", "model", "user"]


def test_client_uses_key_and_timeout(fake_genai):
    _client(SimpleNamespace(), Settings(api_key="secret", request_timeout=2.5))
    kwargs = fake_genai.instances[0].kwargs
    assert kwargs["api_key"] == "secret"
    assert kwargs["http_options"].timeout == 2500


def test_missing_key_fails_the_call(fake_genai):
    client = GeminiClient(Settings(api_key=None))
    with pytest.raises(RuntimeError, match="GEMINI_API_KEY"):
        client.classify("n", [], "x", 0.1)
    assert fake_genai.instances == []
