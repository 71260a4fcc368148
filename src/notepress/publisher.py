"""Synchronous publisher: one Obsidian note to one WordPress post.

:class:`Publisher` drives a note through a linear state machine::

    IDLE -> VALIDATING -> IMAGE_UPLOADING -> RENDERING
         -> TAXONOMY_RESOLVING -> SUBMITTING -> WRITING_BACK -> DONE

with ``FAILED`` reachable from every state.  The first publish of a note
creates a post and records its id in the note's frontmatter; every later
publish updates that same post.

Usage::

    from notepress import LocalVault, NotepressConfig, Publisher

    config = NotepressConfig(
        site_url="https://blog.example.com",
        username="editor",
        application_password="abcd efgh ijkl mnop",
        publishable_folder="Blog",
    )
    with Publisher(config, LocalVault("~/vault")) as publisher:
        result = publisher.publish("Blog/hello.md")
        print(result.success, result.post_url)
"""

from __future__ import annotations

import posixpath
import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from notepress import frontmatter
from notepress.config import NotepressConfig
from notepress.converter.md_to_blocks import MarkdownToBlocksConverter
from notepress.errors import (
    ErrorCode,
    NotepressConfigError,
    NotepressError,
    NotepressNotFoundError,
    NotepressRemoteError,
    NotepressScopeError,
    NotepressValidationError,
    error_code_value,
)
from notepress.image import upload_images
from notepress.models import (
    ConnectionTestResult,
    ConversionWarning,
    Frontmatter,
    PostStatus,
    PublishPayload,
    PublishResult,
    PublishState,
    UploadedImage,
)
from notepress.observability import fields, get_logger, resolve_metrics
from notepress.vault import Vault, normalize_path
from notepress.wordpress_api import MediaAPI, PostAPI, TermAPI, UserAPI, WordPressTransport

log = get_logger("notepress.publisher")

NOT_CONFIGURED_MESSAGE = "WordPress connection not configured. Please check the settings."


# ---------------------------------------------------------------------------
# Helpers shared with AsyncPublisher
# ---------------------------------------------------------------------------

def is_publishable(config: NotepressConfig, path: str) -> bool:
    """Whether *path* is a Markdown note inside the publishable folder."""
    normalized = normalize_path(path)
    if not normalized.endswith(".md"):
        return False
    folder = config.publishable_folder
    if not folder:
        return True
    return normalized.startswith(f"{folder}/")


def check_publishable(config: NotepressConfig, path: str, status: str | None) -> None:
    """Gatekeeping run in ``VALIDATING``; raises before any network call."""
    if not config.is_configured:
        raise NotepressConfigError(
            message=NOT_CONFIGURED_MESSAGE,
            context={"missing": config.missing_settings()},
        )
    if not is_publishable(config, path):
        raise NotepressScopeError(
            message=f"File is not in the publishable folder: {config.publishable_folder or '(any)'}",
            context={"path": path, "publishable_folder": config.publishable_folder},
        )
    if status is not None and status not in PostStatus.values():
        raise NotepressValidationError(
            message=f"Unknown post status: {status!r}",
            context={"status": status, "allowed": sorted(PostStatus.values())},
        )


def template_path(config: NotepressConfig) -> str:
    """Vault path of the starter note for *config*."""
    folder = config.publishable_folder
    return f"{folder}/{frontmatter.TEMPLATE_NAME}" if folder else frontmatter.TEMPLATE_NAME


def read_note(vault: Vault, path: str) -> str:
    try:
        return vault.read_text(path)
    except OSError as exc:
        raise NotepressNotFoundError(
            message=f"Cannot read note {path}: {exc}",
            context={"path": path},
            cause=exc,
        ) from exc


def effective_status(override: str | None, metadata: Frontmatter, default: str) -> str:
    """Per-call override, else the frontmatter status, else the default."""
    return override or metadata.status or default


def build_payload(
    metadata: Frontmatter,
    path: str,
    content: str,
    status: str,
) -> PublishPayload:
    """Assemble the post body (without taxonomy ids)."""
    filename = posixpath.basename(normalize_path(path))
    return PublishPayload(
        title=frontmatter.get_title(metadata, filename),
        content=content,
        status=status,
        slug=metadata.slug or None,
        excerpt=metadata.excerpt or None,
        date=metadata.date if metadata.date and status == PostStatus.FUTURE.value else None,
    )


def check_post(post: Any, operation: str) -> dict[str, Any]:
    """The post object from a create/update response, or a remote error.

    The post id must be a positive integer.
    """
    if not isinstance(post, dict) or "id" not in post:
        raise NotepressRemoteError(
            message=f"WordPress returned no post id for {operation}",
            context={"operation": operation},
        )
    try:
        post_id = int(post["id"])
    except (TypeError, ValueError) as exc:
        raise _invalid_post_id(post, operation, exc) from exc
    if post_id <= 0:
        raise _invalid_post_id(post, operation)
    return post


def _invalid_post_id(post: dict[str, Any], operation: str, cause: Exception | None = None) -> NotepressRemoteError:
    return NotepressRemoteError(
        message=f"WordPress returned an invalid post id for {operation}: {post['id']!r}",
        context={"operation": operation, "id": post["id"]},
        cause=cause,
    )


def write_back_fields(post: dict[str, Any]) -> dict[str, Any]:
    """Frontmatter fields to persist after a successful submit."""
    changes: dict[str, Any] = {"remote_id": int(post["id"])}
    if post.get("link"):
        changes["remote_url"] = str(post["link"])
    if post.get("status") in PostStatus.values():
        changes["status"] = post["status"]
    return changes


class PublishRun:
    """State and diagnostics of a single publish call."""

    def __init__(self, path: str) -> None:
        self.path = path
        self.state = PublishState.IDLE
        self.warnings: list[ConversionWarning] = []
        self.started = time.monotonic()

    def advance(self, state: PublishState) -> None:
        log.debug(
            "Publish state change",
            extra=fields(op="publish", path=self.path, src=self.state.value, dst=state.value),
        )
        self.state = state

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started) * 1000

    def succeeded(self, post: dict[str, Any], created: bool, metrics: Any) -> PublishResult:
        self.advance(PublishState.DONE)
        metrics.increment("notepress.publish_total", tags={"outcome": "success"})
        metrics.timing("notepress.publish_duration_ms", self.elapsed_ms)
        log.info(
            "Publish complete",
            extra=fields(
                op="publish",
                path=self.path,
                post_id=post["id"],
                created=created,
                warnings=len(self.warnings),
            ),
        )
        return PublishResult(
            success=True,
            post_id=int(post["id"]),
            post_url=post.get("link"),
            status=post.get("status"),
            created=created,
            state=self.state,
            warnings=self.warnings,
        )

    def failed(self, exc: Exception, metrics: Any) -> PublishResult:
        failed_in = self.state
        self.state = PublishState.FAILED
        if isinstance(exc, NotepressError):
            code, message = error_code_value(exc.code), exc.message
            log.error(
                "Publish failed",
                extra=fields(op="publish", path=self.path, state=failed_in.value, error_code=code, error=message),
            )
        else:
            code, message = ErrorCode.UNEXPECTED_ERROR.value, str(exc) or type(exc).__name__
            log.exception(
                "Publish failed unexpectedly",
                extra=fields(op="publish", path=self.path, state=failed_in.value),
            )
        metrics.increment("notepress.publish_total", tags={"outcome": "failure", "code": code})
        metrics.timing("notepress.publish_duration_ms", self.elapsed_ms)
        return PublishResult(
            success=False,
            error=message,
            error_code=code,
            state=self.state,
            warnings=self.warnings,
        )


# ---------------------------------------------------------------------------
# Publisher
# ---------------------------------------------------------------------------

class Publisher:
    """Synchronous note publisher.

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
        self._transport = WordPressTransport(config)
        self._posts = PostAPI(self._transport)
        self._media = MediaAPI(self._transport)
        self._users = UserAPI(self._transport)
        self._categories = TermAPI(self._transport, "categories", self._metrics)
        self._tags = TermAPI(self._transport, "tags", self._metrics)
        self._converter = MarkdownToBlocksConverter(config)
        # Per-path lock and the number of publishes holding or waiting on it.
        self._locks: dict[str, tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def is_publishable(self, path: str) -> bool:
        """Whether *path* may be published under the current settings."""
        return is_publishable(self._config, path)

    # ------------------------------------------------------------------
    # Publish
    # ------------------------------------------------------------------

    def publish(self, path: str, status: str | None = None) -> PublishResult:
        """Publish the note at *path*, creating or updating its post.

        Parameters
        ----------
        path:
            Vault path of the note.
        status:
            Per-call status override, e.g. ``"draft"`` for "publish as
            draft".  Wins over the frontmatter ``status``, which wins over
            ``config.default_status``.

        Returns
        -------
        PublishResult
            Never raises: failures are reported through ``success``,
            ``error`` and ``error_code``.  Skipped images and dropped
            taxonomy names are listed in ``warnings`` either way.
        """
        run = PublishRun(path)
        log.info("Publish started", extra=fields(op="publish", path=path, status=status))
        try:
            with self._path_lock(path):
                return self._publish(run, path, status)
        except Exception as exc:
            return run.failed(exc, self._metrics)

    @contextmanager
    def _path_lock(self, path: str) -> Iterator[None]:
        """Hold the lock of *path*; the entry is dropped once nobody uses it."""
        key = normalize_path(path)
        with self._locks_guard:
            lock, users = self._locks.get(key) or (threading.Lock(), 0)
            self._locks[key] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                lock, users = self._locks[key]
                if users == 1:
                    del self._locks[key]
                else:
                    self._locks[key] = (lock, users - 1)

    def _publish(self, run: PublishRun, path: str, status: str | None) -> PublishResult:
        run.advance(PublishState.VALIDATING)
        check_publishable(self._config, path, status)
        text = read_note(self._vault, path)
        metadata = frontmatter.parse(text)

        image_map: dict[str, UploadedImage] = {}
        if self._config.upload_images:
            run.advance(PublishState.IMAGE_UPLOADING)
            image_map, image_warnings = upload_images(
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
                payload.categories, dropped = self._categories.resolve_ids(metadata.categories)
                run.warnings.extend(dropped)
            if metadata.tags:
                payload.tags, dropped = self._tags.resolve_ids(metadata.tags)
                run.warnings.extend(dropped)

        run.advance(PublishState.SUBMITTING)
        created = metadata.remote_id is None
        if created:
            post = check_post(self._posts.create(payload.to_dict()), "create")
        else:
            post = check_post(self._posts.update(metadata.remote_id, payload.to_dict()), "update")

        run.advance(PublishState.WRITING_BACK)
        self._vault.write_text(path, frontmatter.update(text, write_back_fields(post)))

        return run.succeeded(post, created, self._metrics)

    # ------------------------------------------------------------------
    # Connection test
    # ------------------------------------------------------------------

    def test_connection(self) -> ConnectionTestResult:
        """Check the credentials with ``GET /users/me``.

        Never raises; any failure is reported through ``error``.
        """
        if not self._config.is_configured:
            return ConnectionTestResult(success=False, error=NOT_CONFIGURED_MESSAGE)
        try:
            user = self._users.me()
        except NotepressError as exc:
            log.warning("Connection test failed", extra=fields(op="test_connection", error=exc.message))
            return ConnectionTestResult(success=False, error=exc.message)
        except Exception as exc:
            log.exception("Connection test failed unexpectedly", extra=fields(op="test_connection"))
            return ConnectionTestResult(success=False, error=str(exc) or type(exc).__name__)
        name = user.get("name") if isinstance(user, dict) else None
        return ConnectionTestResult(success=True, username=name)

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def create_template(self) -> str:
        """Write the starter note into the publishable folder.

        An existing template is left untouched.

        Returns
        -------
        str
            Vault path of the template.
        """
        folder = self._config.publishable_folder
        path = template_path(self._config)
        if not self._vault.exists(path):
            if folder:
                self._vault.make_folder(folder)
            self._vault.write_text(path, frontmatter.TEMPLATE)
            log.info("Template created", extra=fields(op="create_template", path=path))
        return path

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP transport."""
        self._transport.close()

    def __enter__(self) -> Publisher:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
