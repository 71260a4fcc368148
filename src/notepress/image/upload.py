"""Upload the local images a note references.

For each image reference (external URLs skipped), the path is resolved in
the vault, checked against the allow-list, read and sent to the media
endpoint.  The result maps the reference path, exactly as written in the
note, to an :class:`UploadedImage`; a path referenced several times is
uploaded once.

A failing image never aborts the publish: it is logged, counted and
returned as a :class:`ConversionWarning`, and the renderer falls back to
the literal local path for it.
"""

from __future__ import annotations

import asyncio
import posixpath
from typing import Any

from notepress.errors import NotepressError, NotepressUploadError, error_code_value
from notepress.models import ConversionWarning, ImageReference, UploadedImage
from notepress.observability import NoopMetricsHook, fields, get_logger
from notepress.vault import Vault

from .detect import extract_image_references, is_external
from .resolve import resolve_image_path
from .validate import mime_for_path

log = get_logger("notepress.image")


def _pending(markdown: str) -> list[ImageReference]:
    """Local references with distinct paths, in discovery order."""
    seen: set[str] = set()
    pending: list[ImageReference] = []
    for ref in extract_image_references(markdown):
        if is_external(ref.path) or ref.path in seen:
            continue
        seen.add(ref.path)
        pending.append(ref)
    return pending


def _prepare(vault: Vault, note_path: str, ref: ImageReference) -> tuple[str, str, bytes]:
    """Return ``(filename, mime_type, data)`` for a local reference."""
    resolved = resolve_image_path(vault, note_path, ref.path)
    mime_type = mime_for_path(resolved)
    try:
        data = vault.read_bytes(resolved)
    except OSError as exc:
        raise NotepressUploadError(
            message=f"Cannot read image {resolved}: {exc}",
            context={"src": ref.path, "filename": resolved},
            cause=exc,
        ) from exc
    return posixpath.basename(resolved), mime_type, data


def _uploaded(ref: ImageReference, filename: str, media: Any) -> UploadedImage:
    if not isinstance(media, dict) or not media.get("source_url") or "id" not in media:
        raise NotepressUploadError(
            message=f"Media upload of {filename} returned no source_url",
            context={"src": ref.path, "filename": filename},
        )
    try:
        media_id = int(media["id"])
    except (TypeError, ValueError) as exc:
        raise NotepressUploadError(
            message=f"Media upload of {filename} returned an invalid id: {media['id']!r}",
            context={"src": ref.path, "filename": filename},
            cause=exc,
        ) from exc
    return UploadedImage(
        local_path=ref.path,
        remote_url=str(media["source_url"]),
        media_id=media_id,
    )


def _skipped(ref: ImageReference, exc: NotepressError, metrics: Any) -> ConversionWarning:
    metrics.increment("notepress.upload_failure_total", tags={"code": error_code_value(exc.code)})
    log.warning(
        "Skipping image",
        extra=fields(op="upload_images", src=ref.path, error_code=error_code_value(exc.code), error=exc.message),
    )
    return ConversionWarning(
        code="IMAGE_SKIPPED",
        message=f"Image '{ref.path}' was not uploaded: {exc.message}",
        context={"src": ref.path, "error_code": error_code_value(exc.code)},
    )


def upload_images(
    media_api: Any,
    vault: Vault,
    note_path: str,
    markdown: str,
    metrics: Any | None = None,
) -> tuple[dict[str, UploadedImage], list[ConversionWarning]]:
    """Upload every local image referenced by *markdown*.

    Parameters
    ----------
    media_api:
        A :class:`~notepress.wordpress_api.MediaAPI`.
    vault:
        The vault holding the note and its attachments.
    note_path:
        Vault path of the note; relative references resolve against it.
    markdown:
        The note text.
    metrics:
        Receives ``upload_success_total`` / ``upload_failure_total``.

    Returns
    -------
    tuple[dict[str, UploadedImage], list[ConversionWarning]]
        The image map keyed by reference path, and one warning per image
        that was skipped.
    """
    metrics = metrics if metrics is not None else NoopMetricsHook()
    image_map: dict[str, UploadedImage] = {}
    warnings: list[ConversionWarning] = []

    for ref in _pending(markdown):
        try:
            filename, mime_type, data = _prepare(vault, note_path, ref)
            media = media_api.upload(filename, data, mime_type)
            image_map[ref.path] = _uploaded(ref, filename, media)
        except NotepressError as exc:
            warnings.append(_skipped(ref, exc, metrics))
            continue
        metrics.increment("notepress.upload_success_total")

    return image_map, warnings


async def async_upload_images(
    media_api: Any,
    vault: Vault,
    note_path: str,
    markdown: str,
    metrics: Any | None = None,
) -> tuple[dict[str, UploadedImage], list[ConversionWarning]]:
    """Upload every local image referenced by *markdown* (async).

    Uploads are awaited one after another, in discovery order.  Vault
    lookups and reads run in the default executor.  See
    :func:`upload_images`.
    """
    metrics = metrics if metrics is not None else NoopMetricsHook()
    loop = asyncio.get_running_loop()
    image_map: dict[str, UploadedImage] = {}
    warnings: list[ConversionWarning] = []

    for ref in _pending(markdown):
        try:
            filename, mime_type, data = await loop.run_in_executor(
                None, _prepare, vault, note_path, ref,
            )
            media = await media_api.upload(filename, data, mime_type)
            image_map[ref.path] = _uploaded(ref, filename, media)
        except NotepressError as exc:
            warnings.append(_skipped(ref, exc, metrics))
            continue
        metrics.increment("notepress.upload_success_total")

    return image_map, warnings
