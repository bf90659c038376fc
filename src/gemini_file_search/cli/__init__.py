"""Command-line interface for Gemini File Search."""

from .main import app

__all__ = ["app"]
