"""ToolGate - managed tool-call gateway and edge service."""

__version__ = "1.0.0"
