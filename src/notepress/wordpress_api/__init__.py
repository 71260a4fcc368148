"""WordPress REST API layer: transports and endpoint wrappers."""

from __future__ import annotations

from .media import AsyncMediaAPI, MediaAPI
from .posts import AsyncPostAPI, PostAPI
from .terms import AsyncTermAPI, TermAPI
from .transport import AsyncWordPressTransport, WordPressTransport
from .users import AsyncUserAPI, UserAPI

__all__ = [
    "AsyncMediaAPI",
    "AsyncPostAPI",
    "AsyncTermAPI",
    "AsyncUserAPI",
    "AsyncWordPressTransport",
    "MediaAPI",
    "PostAPI",
    "TermAPI",
    "UserAPI",
    "WordPressTransport",
]
