"""User API wrappers: only ``GET /users/me``, used as a connection test."""

from __future__ import annotations

from typing import Any

from .transport import AsyncWordPressTransport, WordPressTransport


class UserAPI:
    def __init__(self, transport: WordPressTransport) -> None:
        self._transport = transport

    def me(self) -> dict[str, Any]:
        """Return the user the credentials authenticate as."""
        return self._transport.request("GET", "/users/me")


class AsyncUserAPI:
    def __init__(self, transport: AsyncWordPressTransport) -> None:
        self._transport = transport

    async def me(self) -> dict[str, Any]:
        """Return the user the credentials authenticate as (async)."""
        return await self._transport.request("GET", "/users/me")
