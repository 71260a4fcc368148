"""Image validation against the upload allow-list.

Only the extension is checked: the MIME type sent to WordPress is the one
the allow-list maps the extension to.
"""

from __future__ import annotations

import posixpath

from notepress.config import UPLOAD_MIME_TYPES
from notepress.errors import NotepressImageTypeError


def mime_for_path(path: str) -> str:
    """Return the upload MIME type for *path*.

    Raises
    ------
    NotepressImageTypeError
        If the extension (compared case-insensitively) is not in
        :data:`~notepress.config.UPLOAD_MIME_TYPES`.
    """
    extension = posixpath.splitext(path)[1].lower()
    mime_type = UPLOAD_MIME_TYPES.get(extension)
    if mime_type is None:
        raise NotepressImageTypeError(
            message=f"Unsupported image type: {extension or '(none)'}",
            context={
                "src": path,
                "extension": extension,
                "allowed_extensions": sorted(UPLOAD_MIME_TYPES),
            },
        )
    return mime_type
