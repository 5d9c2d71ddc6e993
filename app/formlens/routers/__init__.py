"""
Routers package for FastAPI endpoints.

Organized by domain:
- sessions: Upload, parse, hover, preview geometry and results
- ui: The single-page UI shell
"""

from . import sessions, ui

__all__ = ["sessions", "ui"]
