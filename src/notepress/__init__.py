"""notepress: publish Obsidian notes to WordPress as Gutenberg blocks.

Public re-exports
-----------------

* **Publishers:** :class:`Publisher`, :class:`AsyncPublisher`
* **Configuration:** :class:`NotepressConfig`
* **Vault access:** :class:`Vault`, :class:`LocalVault`
* **Conversion:** :class:`MarkdownToBlocksConverter`
* **Errors:** Every :class:`NotepressError` subclass and :class:`ErrorCode`
* **Models:** All result dataclasses, enums, and supporting types

Usage::

    from notepress import LocalVault, NotepressConfig, Publisher

    config = NotepressConfig(
        site_url="https://blog.example.com",
        username="editor",
        application_password="abcd efgh ijkl mnop",
    )
    with Publisher(config, LocalVault("vault")) as publisher:
        result = publisher.publish("Blog/hello.md")
"""

from __future__ import annotations

# ── Publishers ─────────────────────────────────────────────────────────
from notepress.async_publisher import AsyncPublisher

# ── Configuration ───────────────────────────────────────────────────────
from notepress.config import UPLOAD_MIME_TYPES, NotepressConfig
from notepress.converter import MarkdownToBlocksConverter

# ── Errors ──────────────────────────────────────────────────────────────
from notepress.errors import (
    ErrorCode,
    NotepressAuthError,
    NotepressConfigError,
    NotepressError,
    NotepressImageError,
    NotepressImageNotFoundError,
    NotepressImageTypeError,
    NotepressNetworkError,
    NotepressNotFoundError,
    NotepressPermissionError,
    NotepressRemoteError,
    NotepressScopeError,
    NotepressTaxonomyError,
    NotepressUploadError,
    NotepressValidationError,
)

# ── Models ──────────────────────────────────────────────────────────────
from notepress.models import (
    BlockKind,
    CalloutInfo,
    ConnectionTestResult,
    ConversionResult,
    ConversionWarning,
    Frontmatter,
    ImageReference,
    ImageSyntax,
    PostStatus,
    PublishPayload,
    PublishResult,
    PublishState,
    RawBlock,
    UploadedImage,
)
from notepress.publisher import Publisher
from notepress.vault import LocalVault, Vault

__all__ = [
    # Publishers
    "AsyncPublisher",
    "Publisher",
    # Configuration
    "NotepressConfig",
    "UPLOAD_MIME_TYPES",
    # Vault
    "LocalVault",
    "Vault",
    # Conversion
    "MarkdownToBlocksConverter",
    # Errors
    "ErrorCode",
    "NotepressAuthError",
    "NotepressConfigError",
    "NotepressError",
    "NotepressImageError",
    "NotepressImageNotFoundError",
    "NotepressImageTypeError",
    "NotepressNetworkError",
    "NotepressNotFoundError",
    "NotepressPermissionError",
    "NotepressRemoteError",
    "NotepressScopeError",
    "NotepressTaxonomyError",
    "NotepressUploadError",
    "NotepressValidationError",
    # Models
    "BlockKind",
    "CalloutInfo",
    "ConnectionTestResult",
    "ConversionResult",
    "ConversionWarning",
    "Frontmatter",
    "ImageReference",
    "ImageSyntax",
    "PostStatus",
    "PublishPayload",
    "PublishResult",
    "PublishState",
    "RawBlock",
    "UploadedImage",
]

__version__ = "0.1.0"
