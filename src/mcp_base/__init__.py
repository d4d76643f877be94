"""MCP Base -- uniform tool-calling layer over third-party REST APIs."""

from __future__ import annotations

__version__ = "0.0.1"
