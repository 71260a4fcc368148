"""Resolve an image reference to a file in the vault.

Three strategies are tried in order:

1. A leading ``/`` makes the path vault-absolute.
2. The vault's own link resolution, relative to the note.
3. The note's folder joined with the reference.

The first strategy that applies wins; the result is then checked for
existence.
"""

from __future__ import annotations

import posixpath

from notepress.errors import NotepressImageNotFoundError
from notepress.vault import Vault, normalize_path


def candidate_path(vault: Vault, note_path: str, ref_path: str) -> str:
    """Return the vault path *ref_path* points at, without checking it exists."""
    if ref_path.startswith("/"):
        return normalize_path(ref_path[1:])

    linked = vault.resolve_link(ref_path, note_path)
    if linked:
        return linked

    folder = posixpath.dirname(normalize_path(note_path))
    return normalize_path(f"{folder}/{ref_path}")


def resolve_image_path(vault: Vault, note_path: str, ref_path: str) -> str:
    """Resolve *ref_path*, written in *note_path*, to an existing vault file.

    Raises
    ------
    NotepressImageNotFoundError
        When the resolved path does not name a file.
    """
    resolved = candidate_path(vault, note_path, ref_path)
    if not resolved or not vault.exists(resolved):
        raise NotepressImageNotFoundError(
            message=f"Image not found: {ref_path}",
            context={"src": ref_path, "resolved_path": resolved},
        )
    return resolved
