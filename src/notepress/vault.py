"""Vault access: reading and writing notes and attachments.

The publisher never touches the file system directly; it goes through an
object satisfying :class:`Vault`.  :class:`LocalVault` is the
implementation backed by a directory on disk.

All paths are vault-relative POSIX strings (``"Blog/post.md"``).
"""

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class Vault(Protocol):
    """Protocol for the file access the publisher needs."""

    def read_text(self, path: str) -> str:
        """Return the text of the note at *path*."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Return the raw content of the file at *path*."""
        ...

    def write_text(self, path: str, text: str) -> None:
        """Replace the content of the note at *path*."""
        ...

    def exists(self, path: str) -> bool:
        """Whether *path* names an existing file."""
        ...

    def resolve_link(self, link: str, source_path: str) -> str | None:
        """Resolve a link written in *source_path* to a vault path."""
        ...

    def make_folder(self, path: str) -> None:
        """Create the folder at *path* (and its parents) if missing."""
        ...


def normalize_path(path: str) -> str:
    """Collapse ``.``/``..`` segments and strip leading and trailing slashes."""
    path = path.replace("\\", "/").strip("/")
    if not path:
        return ""
    normalized = posixpath.normpath(path)
    return "" if normalized == "." else normalized


class LocalVault:
    """A vault rooted at a directory on the local file system.

    Parameters
    ----------
    root:
        The vault directory.  Paths escaping it are rejected with
        :class:`ValueError`.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _abs(self, path: str) -> Path:
        target = (self.root / normalize_path(path)).resolve()
        if target != self.root and self.root not in target.parents:
            raise ValueError(f"Path escapes the vault: {path!r}")
        return target

    def read_text(self, path: str) -> str:
        return self._abs(path).read_text(encoding="utf-8")

    def read_bytes(self, path: str) -> bytes:
        return self._abs(path).read_bytes()

    def write_text(self, path: str, text: str) -> None:
        target = self._abs(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")

    def exists(self, path: str) -> bool:
        try:
            return self._abs(path).is_file()
        except ValueError:
            return False

    def make_folder(self, path: str) -> None:
        self._abs(path).mkdir(parents=True, exist_ok=True)

    def resolve_link(self, link: str, source_path: str) -> str | None:
        """Resolve *link* the way Obsidian resolves embeds.

        The link is tried relative to the folder of *source_path*, then
        relative to the vault root.  Failing both, the vault is searched
        for a file with the link's name; the match with the shortest path
        wins, ties broken alphabetically.
        """
        folder = posixpath.dirname(normalize_path(source_path))
        for candidate in (posixpath.join(folder, link), link):
            candidate = normalize_path(candidate)
            if candidate and self.exists(candidate):
                return candidate

        name = posixpath.basename(normalize_path(link))
        if not name:
            return None
        matches = sorted(
            (p.relative_to(self.root).as_posix() for p in self.root.rglob(name) if p.is_file()),
            key=lambda p: (p.count("/"), p),
        )
        return matches[0] if matches else None
