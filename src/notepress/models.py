"""Public data models for the notepress SDK.

This module contains every result type, warning type, enum, and
supporting dataclass referenced by the public API surface.  All types
are plain dataclasses with no behaviour beyond what is needed for
structural equality and payload serialisation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class PostStatus(str, Enum):
    """WordPress post statuses accepted in frontmatter and settings."""

    DRAFT = "draft"
    PUBLISH = "publish"
    PRIVATE = "private"
    FUTURE = "future"

    @classmethod
    def values(cls) -> frozenset[str]:
        return frozenset(member.value for member in cls)


class BlockKind(str, Enum):
    """Classification of a raw block produced by the segmenter."""

    HEADING = "heading"
    CODE_FENCE = "code_fence"
    CALLOUT = "callout"
    QUOTE = "quote"
    LIST = "list"
    RULE = "rule"
    IMAGE = "image"
    PARAGRAPH = "paragraph"


class ImageSyntax(str, Enum):
    """Which Markdown syntax an image reference was written in."""

    MARKDOWN = "markdown"
    """``![alt](path)``"""

    WIKILINK = "wikilink"
    """``![[path]]`` or ``![[path|alt]]``"""


class PublishState(str, Enum):
    """States of the publish state machine.

    The normal path is linear::

        IDLE -> VALIDATING -> IMAGE_UPLOADING -> RENDERING
             -> TAXONOMY_RESOLVING -> SUBMITTING -> WRITING_BACK -> DONE

    ``FAILED`` is absorbing and reachable from any non-terminal state.
    """

    IDLE = "idle"
    VALIDATING = "validating"
    IMAGE_UPLOADING = "image_uploading"
    RENDERING = "rendering"
    TAXONOMY_RESOLVING = "taxonomy_resolving"
    SUBMITTING = "submitting"
    WRITING_BACK = "writing_back"
    DONE = "done"
    FAILED = "failed"


# ---------------------------------------------------------------------------
# Frontmatter
# ---------------------------------------------------------------------------

@dataclass
class Frontmatter:
    """Recognised post properties from a note's leading metadata block.

    Scalars are ``None`` when absent; list fields are empty when absent.
    Unrecognised keys are not modelled and do not survive a rewrite.
    """

    title: str | None = None
    slug: str | None = None
    status: str | None = None
    excerpt: str | None = None
    date: str | None = None
    remote_id: int | None = None
    remote_url: str | None = None
    categories: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Converter types
# ---------------------------------------------------------------------------

@dataclass
class RawBlock:
    """A contiguous run of body lines classified as one block kind.

    Attributes
    ----------
    kind:
        The block classification.
    lines:
        The source lines, verbatim (code fences include both delimiters).
    """

    kind: BlockKind
    lines: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


@dataclass
class CalloutInfo:
    """Parsed ``> [!kind]<fold> title`` callout."""

    kind: str
    title: str
    content: str
    foldable: bool = False
    default_folded: bool = False


@dataclass
class ConversionWarning:
    """A non-fatal issue encountered while converting or publishing.

    Attributes
    ----------
    code:
        A machine-readable warning code (e.g. ``"IMAGE_UNRESOLVED"``).
    message:
        A human-readable description of the issue.
    context:
        Arbitrary structured data for diagnostics.
    """

    code: str
    message: str
    context: dict = field(default_factory=dict)


@dataclass
class ConversionResult:
    """Output of the Markdown-to-Gutenberg conversion.

    Attributes
    ----------
    content:
        The rendered block markup, blocks joined by a blank line.
    blocks:
        The raw blocks the content was rendered from, in order.
    warnings:
        Non-fatal issues discovered during conversion.
    """

    content: str = ""
    blocks: list[RawBlock] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ImageReference:
    """An image embed found in Markdown text.

    Attributes
    ----------
    original_syntax:
        The full matched text, e.g. ``![alt](img.png)``.
    path:
        The referenced path or URL.
    alt_text:
        Alt text; for wikilinks without an alias this is the path.
    syntax:
        Which of the two syntaxes matched.
    """

    original_syntax: str
    path: str
    alt_text: str
    syntax: ImageSyntax


@dataclass(frozen=True)
class UploadedImage:
    """A local image that now lives in the WordPress media library."""

    local_path: str
    remote_url: str
    media_id: int


# ---------------------------------------------------------------------------
# Publishing
# ---------------------------------------------------------------------------

@dataclass
class PublishPayload:
    """Body of a ``POST /posts`` or ``PUT /posts/<id>`` request."""

    title: str
    content: str
    status: str
    slug: str | None = None
    excerpt: str | None = None
    date: str | None = None
    categories: list[int] | None = None
    tags: list[int] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON body, omitting unset optional fields."""
        body: dict[str, Any] = {
            "title": self.title,
            "content": self.content,
            "status": self.status,
        }
        for name in ("slug", "excerpt", "date", "categories", "tags"):
            value = getattr(self, name)
            if value is not None:
                body[name] = value
        return body


@dataclass
class PublishResult:
    """Terminal value of :meth:`Publisher.publish`.

    Attributes
    ----------
    success:
        Whether the post was created or updated.
    post_id:
        The WordPress post id.
    post_url:
        The public permalink reported by WordPress.
    status:
        The status WordPress reported for the post.
    created:
        ``True`` for the create path, ``False`` for the update path.
    error:
        Human-readable failure message when ``success`` is ``False``.
    error_code:
        The :class:`~notepress.errors.ErrorCode` of the failure.
    state:
        The last state the publish state machine reached.
    warnings:
        Per-item problems (skipped images, dropped taxonomy names).
    """

    success: bool
    post_id: int | None = None
    post_url: str | None = None
    status: str | None = None
    created: bool = False
    error: str | None = None
    error_code: str | None = None
    state: PublishState = PublishState.IDLE
    warnings: list[ConversionWarning] = field(default_factory=list)


@dataclass
class ConnectionTestResult:
    """Result of :meth:`Publisher.test_connection`."""

    success: bool
    username: str | None = None
    error: str | None = None
