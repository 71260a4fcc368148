"""SDK configuration for notepress.

:class:`NotepressConfig` is a dataclass that captures the WordPress
connection and every publishing knob.  Instances are passed to both
:class:`Publisher` and :class:`AsyncPublisher` and are treated as read-only
for the duration of a publish.

The module-level constant :data:`UPLOAD_MIME_TYPES` is the fixed image
allow-list used by the upload pipeline.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

from notepress.models import PostStatus

# ---------------------------------------------------------------------------
# Image allow-list
# ---------------------------------------------------------------------------

UPLOAD_MIME_TYPES: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}
"""Extension to MIME type mapping for images that may be uploaded."""

API_PREFIX = "/wp-json/wp/v2"


# ---------------------------------------------------------------------------
# Configuration dataclass
# ---------------------------------------------------------------------------

@dataclass
class NotepressConfig:
    """Complete configuration for a notepress publisher.

    Every parameter has a default so that an unconfigured instance can be
    created; :attr:`is_configured` reports whether the connection settings
    needed for publishing are present.

    Parameters
    ----------
    site_url:
        WordPress site root, e.g. ``https://example.com``.  Trailing
        slashes are stripped.
    username:
        WordPress user name.
    application_password:
        WordPress application password.  Never logged.
    publishable_folder:
        Vault-relative folder that scopes publishable notes.  Empty means
        every Markdown note may be published.
    default_status:
        Post status used when neither the call nor the frontmatter sets one.
    upload_images:
        Upload local images to the media library before rendering.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    metrics:
        Optional :class:`~notepress.observability.MetricsHook` backend.
    debug_dump_payload:
        Write the (redacted) request/response payloads to *stderr*.
    """

    # ── Connection ──────────────────────────────────────────────────────
    site_url: str = ""

    username: str = ""

    application_password: str = ""

    # ── Publishing ──────────────────────────────────────────────────────
    publishable_folder: str = ""

    default_status: str = PostStatus.DRAFT.value

    upload_images: bool = True

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    # ── Debug ───────────────────────────────────────────────────────────
    debug_dump_payload: bool = False

    def __post_init__(self) -> None:
        """Normalise and validate configuration after initialization."""
        from urllib.parse import urlparse

        self.site_url = self.site_url.strip().rstrip("/")
        self.publishable_folder = self.publishable_folder.strip().strip("/")

        if self.site_url:
            parsed = urlparse(self.site_url)
            if parsed.scheme not in ("http", "https"):
                raise ValueError(
                    f"site_url must start with http:// or https://, got {self.site_url!r}"
                )
            if parsed.scheme == "http" and parsed.hostname not in (
                "localhost",
                "127.0.0.1",
                "::1",
            ):
                raise ValueError(
                    f"site_url uses insecure HTTP for non-local host '{parsed.hostname}'. "
                    "Use HTTPS to protect your application password, or target "
                    "localhost for testing."
                )

        if self.default_status not in PostStatus.values():
            raise ValueError(
                f"default_status must be one of {sorted(PostStatus.values())}, "
                f"got {self.default_status!r}"
            )
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")

    @property
    def is_configured(self) -> bool:
        """``True`` when site URL, username and password are all set."""
        return not self.missing_settings()

    def missing_settings(self) -> list[str]:
        """Names of the connection settings that are still empty."""
        return [
            name
            for name in ("site_url", "username", "application_password")
            if not getattr(self, name)
        ]

    @property
    def api_base(self) -> str:
        """REST API root, e.g. ``https://example.com/wp-json/wp/v2``."""
        return f"{self.site_url}{API_PREFIX}"

    def __repr__(self) -> str:
        """Mask the password to prevent accidental credential leakage."""
        parts: list[str] = []
        for f in dataclasses.fields(self):
            val = getattr(self, f.name)
            if f.name == "application_password":
                masked = f"...{val[-4:]}" if len(val) >= 4 else "****"
                parts.append(f"application_password='{masked}'")
            else:
                parts.append(f"{f.name}={val!r}")
        return f"NotepressConfig({', '.join(parts)})"
