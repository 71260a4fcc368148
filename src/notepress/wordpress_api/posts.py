"""Post API wrappers for the WordPress REST API.

Provides :class:`PostAPI` (sync) and :class:`AsyncPostAPI` (async) thin
wrappers around the ``/posts`` endpoints.  Both delegate every HTTP
concern (auth, error mapping, metrics) to the underlying transport.
"""

from __future__ import annotations

from typing import Any

from .transport import AsyncWordPressTransport, WordPressTransport


class PostAPI:
    """Synchronous wrapper for the WordPress Posts API.

    Parameters
    ----------
    transport:
        A configured :class:`WordPressTransport` instance.
    """

    def __init__(self, transport: WordPressTransport) -> None:
        self._transport = transport

    def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a new post.

        Parameters
        ----------
        payload:
            The post body, typically :meth:`PublishPayload.to_dict`.

        Returns
        -------
        dict
            The created post object (``id``, ``link``, ``status``, ...).
        """
        return self._transport.request("POST", "/posts", json=payload)

    def update(self, post_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        """Replace the fields of an existing post.

        Raises :class:`NotepressNotFoundError` when *post_id* no longer
        exists on the site.
        """
        return self._transport.request("PUT", f"/posts/{post_id}", json=payload)

    def retrieve(self, post_id: int) -> dict[str, Any]:
        """Retrieve a post by its id."""
        return self._transport.request("GET", f"/posts/{post_id}")


class AsyncPostAPI:
    """Asynchronous wrapper for the WordPress Posts API.

    Parameters
    ----------
    transport:
        A configured :class:`AsyncWordPressTransport` instance.
    """

    def __init__(self, transport: AsyncWordPressTransport) -> None:
        self._transport = transport

    async def create(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Create a new post (async)."""
        return await self._transport.request("POST", "/posts", json=payload)

    async def update(self, post_id: int, payload: dict[str, Any]) -> dict[str, Any]:
        """Replace the fields of an existing post (async)."""
        return await self._transport.request("PUT", f"/posts/{post_id}", json=payload)

    async def retrieve(self, post_id: int) -> dict[str, Any]:
        """Retrieve a post by its id (async)."""
        return await self._transport.request("GET", f"/posts/{post_id}")
