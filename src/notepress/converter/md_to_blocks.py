"""Full Markdown-to-Gutenberg conversion pipeline.

:class:`MarkdownToBlocksConverter` runs three stages:

1. **Strip**: the frontmatter block is removed and the body trimmed.
2. **Segment**: :func:`segment` partitions the body into raw blocks.
3. **Render**: :func:`render_block` turns each block into Gutenberg
   markup; blocks are joined by a blank line.

Image paths that the image map cannot resolve still render (with the
literal local path as ``src``) and are reported as warnings.
"""

from __future__ import annotations

import json
import sys

from notepress.config import NotepressConfig
from notepress.converter.block_renderer import render_block
from notepress.converter.inline import MARKDOWN_IMAGE_RE, WIKILINK_IMAGE_RE, ImageMap
from notepress.converter.segmenter import segment
from notepress.frontmatter import strip_frontmatter
from notepress.models import BlockKind, ConversionResult, ConversionWarning, RawBlock

_EXTERNAL_PREFIXES = ("http://", "https://")


def _unresolved_images(blocks: list[RawBlock], image_map: ImageMap | None) -> list[ConversionWarning]:
    warnings: list[ConversionWarning] = []
    seen: set[str] = set()
    for block in blocks:
        if block.kind is BlockKind.CODE_FENCE:
            continue
        text = block.text
        paths = [m.group(1) for m in WIKILINK_IMAGE_RE.finditer(text)]
        paths += [m.group(2) for m in MARKDOWN_IMAGE_RE.finditer(text)]
        for path in paths:
            if path in seen or path.startswith(_EXTERNAL_PREFIXES):
                continue
            if image_map and path in image_map:
                continue
            seen.add(path)
            warnings.append(ConversionWarning(
                code="IMAGE_UNRESOLVED",
                message=f"Image '{path}' was not uploaded; using the local path",
                context={"path": path},
            ))
    return warnings


class MarkdownToBlocksConverter:
    """Convert an Obsidian note to WordPress block markup.

    Parameters
    ----------
    config:
        SDK configuration.  Only ``debug_dump_payload`` is consulted.

    Examples
    --------
    >>> converter = MarkdownToBlocksConverter()
    >>> result = converter.convert("# Hello\\n\\nWorld")
    >>> [b.kind.value for b in result.blocks]
    ['heading', 'paragraph']
    """

    def __init__(self, config: NotepressConfig | None = None) -> None:
        self._config = config or NotepressConfig()

    def convert(self, markdown: str, image_map: ImageMap | None = None) -> ConversionResult:
        """Strip frontmatter, segment, and render *markdown*.

        Parameters
        ----------
        markdown:
            The whole note, frontmatter included.
        image_map:
            Local path to uploaded image, as built by the upload stage.

        Returns
        -------
        ConversionResult
            ``content`` is the joined markup, ``blocks`` the raw blocks,
            and ``warnings`` one ``IMAGE_UNRESOLVED`` entry per local
            image path missing from *image_map*.
        """
        body = strip_frontmatter(markdown).strip()
        blocks = segment(body)
        content = "\n\n".join(render_block(block, image_map) for block in blocks)
        warnings = _unresolved_images(blocks, image_map)

        if self._config.debug_dump_payload:
            print(
                "[notepress] Raw blocks:",
                json.dumps(
                    [{"kind": b.kind.value, "lines": b.lines} for b in blocks],
                    indent=2,
                    ensure_ascii=False,
                ),
                file=sys.stderr,
            )

        return ConversionResult(content=content, blocks=blocks, warnings=warnings)
