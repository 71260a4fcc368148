"""Asynchronous publisher.

:class:`AsyncPublisher` mirrors :class:`~notepress.publisher.Publisher`
but every remote call is an ``await``.  The calls of one publish are still
made one after another (uploads, then terms, then the post); only
independent publishes of different notes may overlap.

Usage::

    import asyncio
    from notepress import AsyncPublisher, LocalVault, NotepressConfig

    async def main():
        config = NotepressConfig(site_url="https://blog.example.com", ...)
        async with AsyncPublisher(config, LocalVault("vault")) as publisher:
            result = await publisher.publish("Blog/hello.md", status="draft")
            print(result.post_url)

    asyncio.run(main())
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any, TypeVar

from notepress import frontmatter
from notepress.config import NotepressConfig
from notepress.converter.md_to_blocks import MarkdownToBlocksConverter
from notepress.errors import NotepressError
from notepress.image import async_upload_images
from notepress.models import ConnectionTestResult, PublishResult, PublishState, UploadedImage
from notepress.observability import fields, get_logger, resolve_metrics
from notepress.publisher import (
    NOT_CONFIGURED_MESSAGE,
    PublishRun,
    build_payload,
    check_post,
    check_publishable,
    effective_status,
    is_publishable,
    read_note,
    template_path,
    write_back_fields,
)
from notepress.vault import Vault, normalize_path
from notepress.wordpress_api import (
    AsyncMediaAPI,
    AsyncPostAPI,
    AsyncTermAPI,
    AsyncUserAPI,
    AsyncWordPressTransport,
)

log = get_logger("notepress.publisher")

T = TypeVar("T")


async def run_blocking(func: Callable[..., T], *args: Any) -> T:
    """Run a blocking vault call in the default executor."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func, *args)


class AsyncPublisher:
    """Asynchronous note publisher.

    Parameters
    ----------
    config:
        Connection settings and publishing options.
    vault:
        File access for notes and attachments.
    """

    def __init__(self, config: NotepressConfig, vault: Vault) -> None:
        self._config = config
        self._vault = vault
        self._metrics = resolve_metrics(config.metrics)
        self._transport = AsyncWordPressTransport(config)
        self._posts = AsyncPostAPI(self._transport)
        self._media = AsyncMediaAPI(self._transport)
        self._users = AsyncUserAPI(self._transport)
        self._categories = AsyncTermAPI(self._transport, "categories", self._metrics)
        self._tags = AsyncTermAPI(self._transport, "tags", self._metrics)
        self._converter = MarkdownToBlocksConverter(config)
        # Per-path lock and the number of publishes holding or waiting on it.
        self._locks: dict[str, tuple[asyncio.Lock, int]] = {}

    def is_publishable(self, path: str) -> bool:
        """Whether *path* may be published under the current settings."""
        return is_publishable(self._config, path)

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    async def publish(self, path: str, status: str | None = None) -> PublishResult:
        """Publish the note at *path* (async).

        See :meth:`Publisher.publish`.  Concurrent calls for the same path
        on one instance are serialised.
        """
        run = PublishRun(path)
        log.info("Publish started", extra=fields(op="publish", path=path, status=status))
        try:
            async with self._path_lock(path):
                return await self._publish(run, path, status)
        except Exception as exc:
            return run.failed(exc, self._metrics)

    @asynccontextmanager
    async def _path_lock(self, path: str) -> AsyncIterator[None]:
        key = normalize_path(path)
        lock, users = self._locks.get(key) or (asyncio.Lock(), 0)
        self._locks[key] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[key]
            if users == 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    async def _publish(self, run: PublishRun, path: str, status: str | None) -> PublishResult:
        run.advance(PublishState.VALIDATING)
        check_publishable(self._config, path, status)
        text = await run_blocking(read_note, self._vault, path)
        metadata = frontmatter.parse(text)

        image_map: dict[str, UploadedImage] = {}
        if self._config.upload_images:
            run.advance(PublishState.IMAGE_UPLOADING)
            image_map, image_warnings = await async_upload_images(
                self._media, self._vault, path, text, self._metrics,
            )
            run.warnings.extend(image_warnings)

        run.advance(PublishState.RENDERING)
        conversion = self._converter.convert(text, image_map)
        run.warnings.extend(conversion.warnings)
        payload = build_payload(
            metadata,
            path,
            conversion.content,
            effective_status(status, metadata, self._config.default_status),
        )

        if metadata.categories or metadata.tags:
            run.advance(PublishState.TAXONOMY_RESOLVING)
            if metadata.categories:
                payload.categories, dropped = await self._categories.resolve_ids(metadata.categories)
                run.warnings.extend(dropped)
            if metadata.tags:
                payload.tags, dropped = await self._tags.resolve_ids(metadata.tags)
                run.warnings.extend(dropped)

        run.advance(PublishState.SUBMITTING)
        created = metadata.remote_id is None
        if created:
            post = check_post(await self._posts.create(payload.to_dict()), "create")
        else:
            post = check_post(
                await self._posts.update(metadata.remote_id, payload.to_dict()), "update",
            )

        run.advance(PublishState.WRITING_BACK)
        updated = frontmatter.update(text, write_back_fields(post))
        await run_blocking(self._vault.write_text, path, updated)

        return run.succeeded(post, created, self._metrics)

    # ------------------------------------------------------------------
    # Connection test
    # ------------------------------------------------------------------

    async def test_connection(self) -> ConnectionTestResult:
        """Check the credentials with ``GET /users/me`` (async).

        Never raises; any failure is reported through ``error``.
        """
        if not self._config.is_configured:
            return ConnectionTestResult(success=False, error=NOT_CONFIGURED_MESSAGE)
        try:
            user = await self._users.me()
        except NotepressError as exc:
            log.warning("Connection test failed", extra=fields(op="test_connection", error=exc.message))
            return ConnectionTestResult(success=False, error=exc.message)
        except Exception as exc:
            log.exception("Connection test failed unexpectedly", extra=fields(op="test_connection"))
            return ConnectionTestResult(success=False, error=str(exc) or type(exc).__name__)
        name = user.get("name") if isinstance(user, dict) else None
        return ConnectionTestResult(success=True, username=name)

    async def create_template(self) -> str:
        """Write the starter note into the publishable folder (async).

        See :meth:`Publisher.create_template`.
        """
        folder = self._config.publishable_folder
        path = template_path(self._config)
        if not await run_blocking(self._vault.exists, path):
            if folder:
                await run_blocking(self._vault.make_folder, folder)
            await run_blocking(self._vault.write_text, path, frontmatter.TEMPLATE)
            log.info("Template created", extra=fields(op="create_template", path=path))
        return path

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    async def close(self) -> None:
        """Close the HTTP transport."""
        await self._transport.close()

    async def __aenter__(self) -> AsyncPublisher:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
