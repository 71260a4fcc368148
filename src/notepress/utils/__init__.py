"""Utility helpers for notepress."""

from .redact import redact

__all__ = ["redact"]
