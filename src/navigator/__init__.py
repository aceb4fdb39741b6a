"""navigator — Multi-agent hospital help desk routed by a Gemini navigator."""

__version__ = "0.1.0"
