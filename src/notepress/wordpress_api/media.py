"""Media API wrappers for the WordPress REST API.

WordPress accepts an upload as the raw file body of ``POST /media``; the
file name travels in a ``Content-Disposition`` header and the MIME type in
``Content-Type``.  The response is the new attachment, whose
``source_url`` is what rendered ``<img>`` tags point at.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from .transport import AsyncWordPressTransport, WordPressTransport


def upload_headers(filename: str, content_type: str) -> dict[str, str]:
    """Headers for a binary media upload."""
    return {
        "Content-Type": content_type,
        "Content-Disposition": f'attachment; filename="{quote(filename, safe="")}"',
    }


class MediaAPI:
    """Synchronous wrapper for the WordPress Media API.

    Parameters
    ----------
    transport:
        A configured :class:`WordPressTransport` instance.
    """

    def __init__(self, transport: WordPressTransport) -> None:
        self._transport = transport

    def upload(self, filename: str, data: bytes, content_type: str) -> dict[str, Any]:
        """Upload *data* as a new media library item.

        Parameters
        ----------
        filename:
            Base name of the file (e.g. ``"photo.png"``).
        data:
            Raw file bytes.
        content_type:
            MIME type from the upload allow-list.

        Returns
        -------
        dict
            The attachment object, including ``id`` and ``source_url``.
        """
        return self._transport.request(
            "POST",
            "/media",
            content=data,
            headers=upload_headers(filename, content_type),
        )


class AsyncMediaAPI:
    """Asynchronous wrapper for the WordPress Media API."""

    def __init__(self, transport: AsyncWordPressTransport) -> None:
        self._transport = transport

    async def upload(self, filename: str, data: bytes, content_type: str) -> dict[str, Any]:
        """Upload *data* as a new media library item (async)."""
        return await self._transport.request(
            "POST",
            "/media",
            content=data,
            headers=upload_headers(filename, content_type),
        )
