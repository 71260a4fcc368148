"""Frontmatter codec: the leading ``---`` metadata block of a note.

Parsing is schema-directed.  PyYAML tokenises the block with
:class:`yaml.BaseLoader`, so every scalar arrives as a string and each
recognised key is then coerced by its own decoder.  A decoder that cannot
make sense of its value drops that one field; the rest of the metadata
survives.  Unrecognised keys are not modelled and are lost when the block
is rewritten by :func:`update`.

Serialisation always emits keys in the fixed order of :data:`FIELD_ORDER`
and omits unset scalars and empty lists.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import fields as dataclass_fields
from dataclasses import replace
from typing import Any

import yaml

from notepress.models import Frontmatter, PostStatus
from notepress.observability import fields, get_logger

log = get_logger("notepress.frontmatter")

DELIMITER = "---"

FIELD_ORDER: tuple[str, ...] = (
    "title",
    "slug",
    "status",
    "excerpt",
    "date",
    "remote_id",
    "remote_url",
    "categories",
    "tags",
)

_LIST_FIELDS = frozenset({"categories", "tags"})

_INT_RE = re.compile(r"[+-]?[0-9]+")


# Characters YAML treats as line breaks; plain or single-quoted scalars
# holding them are folded on reload.
_LINE_BREAKS = ("\n", "\r", "\x85", "\u2028", "\u2029")


class _Dumper(yaml.SafeDumper):
    """Safe dumper that double-quotes any string containing a line break."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    style = '"' if any(char in value for char in _LINE_BREAKS) else None
    return dumper.represent_scalar("tag:yaml.org,2002:str", value, style=style)


_Dumper.add_representer(str, _represent_str)


# ---------------------------------------------------------------------------
# Field decoders
# ---------------------------------------------------------------------------

class _Drop(Exception):
    """Raised by a decoder to drop its field."""


def _decode_str(value: Any) -> str:
    if not isinstance(value, str):
        raise _Drop(f"expected a scalar, got {type(value).__name__}")
    return value


def _decode_status(value: Any) -> str:
    status = _decode_str(value).strip().lower()
    if status not in PostStatus.values():
        raise _Drop(f"unknown status {status!r}")
    return status


def _decode_remote_id(value: Any) -> int:
    raw = _decode_str(value).strip()
    if not _INT_RE.fullmatch(raw):
        raise _Drop(f"not an integer: {raw!r}")
    remote_id = int(raw)
    if remote_id <= 0:
        raise _Drop(f"not a valid post id: {remote_id}")
    return remote_id


def _decode_name_list(value: Any) -> list[str]:
    # A bare scalar is a one-element list.
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        if not all(isinstance(item, str) for item in value):
            raise _Drop("list items must be scalars")
        return list(value)
    raise _Drop(f"expected a scalar or a list, got {type(value).__name__}")


_DECODERS: dict[str, Callable[[Any], Any]] = {
    "title": _decode_str,
    "slug": _decode_str,
    "status": _decode_status,
    "excerpt": _decode_str,
    "date": _decode_str,
    "remote_id": _decode_remote_id,
    "remote_url": _decode_str,
    "categories": _decode_name_list,
    "tags": _decode_name_list,
}


# ---------------------------------------------------------------------------
# Block location
# ---------------------------------------------------------------------------

def _locate(text: str) -> tuple[int, list[str]] | None:
    """Return ``(closing_line_index, lines)`` or ``None`` if there is no block.

    The first line must be exactly the delimiter; the block ends at the
    next line that is exactly the delimiter.
    """
    lines = text.split("\n")
    if not lines or lines[0].rstrip("\r") != DELIMITER:
        return None
    for index in range(1, len(lines)):
        if lines[index].rstrip("\r") == DELIMITER:
            return index, lines
    return None


def split_frontmatter(text: str) -> tuple[str | None, str]:
    """Split *text* into ``(yaml_source, body)``.

    ``yaml_source`` is ``None`` when the note has no well-formed block, in
    which case *body* is the whole text.
    """
    located = _locate(text)
    if located is None:
        return None, text
    close, lines = located
    return "\n".join(lines[1:close]), "\n".join(lines[close + 1:])


def strip_frontmatter(text: str) -> str:
    """Return the note body without its frontmatter block."""
    return split_frontmatter(text)[1]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def parse(text: str) -> Frontmatter:
    """Parse the leading metadata block of *text*.

    Never raises: a missing or malformed block yields an empty
    :class:`Frontmatter`, and a field that fails to decode is dropped.
    """
    source, _ = split_frontmatter(text)
    if source is None:
        return Frontmatter()

    try:
        raw = yaml.load(source, Loader=yaml.BaseLoader)
    except yaml.YAMLError as exc:
        log.warning("Failed to parse frontmatter", extra=fields(op="parse", error=str(exc)))
        return Frontmatter()

    if not isinstance(raw, dict):
        return Frontmatter()

    values: dict[str, Any] = {}
    for name, decode in _DECODERS.items():
        if name not in raw:
            continue
        try:
            values[name] = decode(raw[name])
        except _Drop as exc:
            log.warning(
                "Dropping frontmatter field",
                extra=fields(op="parse", field=name, reason=str(exc)),
            )
    return Frontmatter(**values)


def to_mapping(metadata: Frontmatter) -> dict[str, Any]:
    """Return the recognised, defined fields of *metadata* in key order."""
    mapping: dict[str, Any] = {}
    for name in FIELD_ORDER:
        value = getattr(metadata, name)
        if name in _LIST_FIELDS:
            if value:
                mapping[name] = list(value)
        elif name == "remote_id":
            # Only positive ids are valid posts; parse drops anything else.
            if value is not None and value > 0:
                mapping[name] = value
        elif value is not None:
            mapping[name] = value
    return mapping


def serialize(metadata: Frontmatter) -> str:
    """Render *metadata* as a complete delimited frontmatter block.

    The result ends with a newline and can be fed straight back to
    :func:`parse`.
    """
    mapping = to_mapping(metadata)
    if mapping:
        body = yaml.dump(
            mapping,
            Dumper=_Dumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
            width=float("inf"),
        )
    else:
        body = ""
    return f"{DELIMITER}\n{body}{DELIMITER}\n"


def merge(base: Frontmatter, partial: Frontmatter | dict[str, Any]) -> Frontmatter:
    """Overlay *partial* onto *base*; set values in *partial* win.

    When *partial* is a :class:`Frontmatter`, only its defined scalars and
    non-empty lists are applied.  When it is a mapping, every recognised
    key present is applied as-is.
    """
    if isinstance(partial, Frontmatter):
        changes = to_mapping(partial)
    else:
        known = {f.name for f in dataclass_fields(Frontmatter)}
        changes = {k: v for k, v in partial.items() if k in known}
    return replace(base, **changes)


def update(text: str, partial: Frontmatter | dict[str, Any]) -> str:
    """Merge *partial* into the note's frontmatter and rewrite the block.

    The whole block is replaced by the freshly serialised one; the body is
    kept byte-for-byte.  A note without frontmatter gets a new block
    followed by a blank line.
    """
    located = _locate(text)
    if located is None:
        block = serialize(merge(Frontmatter(), partial))
        return f"{block}\n{text}"

    close, lines = located
    merged = merge(parse(text), partial)
    block = serialize(merged)
    rest = "\n".join(lines[close + 1:])
    return f"{block}{rest}"


def get_title(metadata: Frontmatter, filename: str) -> str:
    """Frontmatter title, else *filename* without its ``.md`` suffix."""
    if metadata.title:
        return metadata.title
    return re.sub(r"\.md$", "", filename)


# ---------------------------------------------------------------------------
# Starter template
# ---------------------------------------------------------------------------

TEMPLATE_NAME = "Post template.md"

TEMPLATE = """---
title: My Blog Post
slug: my-blog-post
status: draft
excerpt: A short summary of my post
date: 2024-12-25T10:00:00
categories:
  - Technology
tags:
  - obsidian
  - wordpress
---

Write your post here. `remote_id` and `remote_url` are filled in
automatically after the first publish.
"""
