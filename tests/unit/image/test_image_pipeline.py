"""Tests for the image pipeline: detect, resolve, validate, upload."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from notepress.errors import (
    ErrorCode,
    NotepressImageNotFoundError,
    NotepressImageTypeError,
    NotepressUploadError,
)
from notepress.image import (
    async_upload_images,
    extract_image_references,
    is_external,
    mime_for_path,
    resolve_image_path,
    upload_images,
)
from notepress.models import ImageSyntax, UploadedImage

PNG = b"\x89PNG\r\n\x1a\nfake"


def media_api(*responses):
    api = MagicMock()
    api.upload.side_effect = list(responses)
    return api


class TestExtractImageReferences:
    def test_markdown_before_wikilinks(self):
        refs = extract_image_references("![[b.png|Bee]] and ![Ay](a.png)")
        assert [(r.path, r.alt_text, r.syntax) for r in refs] == [
            ("a.png", "Ay", ImageSyntax.MARKDOWN),
            ("b.png", "Bee", ImageSyntax.WIKILINK),
        ]

    def test_wikilink_alt_defaults_to_path(self):
        (ref,) = extract_image_references("![[sub/c.png]]")
        assert ref.alt_text == "sub/c.png"
        assert ref.original_syntax == "![[sub/c.png]]"

    def test_frontmatter_is_ignored(self):
        assert extract_image_references("---\nexcerpt: ![x](y.png)\n---\nNone here") == []

    def test_duplicates_are_kept(self):
        assert len(extract_image_references("![[a.png]] ![[a.png]]")) == 2


class TestIsExternal:
    @pytest.mark.parametrize("path,expected", [
        ("https://example.com/a.png", True),
        ("http://example.com/a.png", True),
        ("a.png", False),
        ("/abs/a.png", False),
        ("ftp://example.com/a.png", False),
    ])
    def test_scheme(self, path, expected):
        assert is_external(path) is expected


class TestResolveImagePath:
    def test_vault_absolute(self, vault, tmp_path):
        (tmp_path / "assets").mkdir()
        (tmp_path / "assets" / "a.png").write_bytes(PNG)
        assert resolve_image_path(vault, "Blog/post.md", "/assets/a.png") == "assets/a.png"

    def test_relative_to_note(self, vault, tmp_path):
        (tmp_path / "Blog" / "img").mkdir(parents=True)
        (tmp_path / "Blog" / "img" / "a.png").write_bytes(PNG)
        assert resolve_image_path(vault, "Blog/post.md", "img/a.png") == "Blog/img/a.png"

    def test_basename_search(self, vault, tmp_path):
        (tmp_path / "attachments" / "deep").mkdir(parents=True)
        (tmp_path / "attachments" / "deep" / "a.png").write_bytes(PNG)
        assert resolve_image_path(vault, "Blog/post.md", "a.png") == "attachments/deep/a.png"

    def test_missing(self, vault):
        with pytest.raises(NotepressImageNotFoundError) as exc_info:
            resolve_image_path(vault, "Blog/post.md", "nope.png")
        assert exc_info.value.code == ErrorCode.IMAGE_NOT_FOUND
        assert exc_info.value.context["src"] == "nope.png"


class TestMimeForPath:
    @pytest.mark.parametrize("path,mime", [
        ("a.jpg", "image/jpeg"),
        ("a.JPEG", "image/jpeg"),
        ("a.png", "image/png"),
        ("a.gif", "image/gif"),
        ("a.webp", "image/webp"),
        ("a.svg", "image/svg+xml"),
    ])
    def test_allowed(self, path, mime):
        assert mime_for_path(path) == mime

    @pytest.mark.parametrize("path", ["a.bmp", "a.pdf", "noext"])
    def test_rejected(self, path):
        with pytest.raises(NotepressImageTypeError):
            mime_for_path(path)

    def test_message_names_extension(self):
        with pytest.raises(NotepressImageTypeError, match=r"Unsupported image type: \.tiff"):
            mime_for_path("scan.tiff")


class TestUploadImages:
    def test_uploads_and_builds_map(self, vault, tmp_path):
        (tmp_path / "Blog").mkdir()
        (tmp_path / "Blog" / "a.png").write_bytes(PNG)
        api = media_api({"id": 11, "source_url": "https://cdn.example.com/a.png"})

        image_map, warnings = upload_images(api, vault, "Blog/post.md", "![[a.png]]\n![x](a.png)")

        assert image_map == {"a.png": UploadedImage("a.png", "https://cdn.example.com/a.png", 11)}
        assert warnings == []
        api.upload.assert_called_once_with("a.png", PNG, "image/png")

    def test_external_images_are_not_uploaded(self, vault):
        api = media_api()
        image_map, warnings = upload_images(api, vault, "post.md", "![x](https://example.com/a.png)")
        assert image_map == {}
        assert warnings == []
        api.upload.assert_not_called()

    def test_failures_become_warnings(self, vault, tmp_path):
        (tmp_path / "doc.pdf").write_bytes(b"%PDF")
        (tmp_path / "ok.png").write_bytes(PNG)
        api = media_api({"id": 3, "source_url": "https://cdn.example.com/ok.png"})
        metrics = MagicMock()

        image_map, warnings = upload_images(
            api, vault, "post.md", "![[missing.png]] ![[doc.pdf]] ![[ok.png]]", metrics,
        )

        assert list(image_map) == ["ok.png"]
        assert [w.code for w in warnings] == ["IMAGE_SKIPPED", "IMAGE_SKIPPED"]
        assert [w.context["error_code"] for w in warnings] == ["IMAGE_NOT_FOUND", "IMAGE_TYPE_ERROR"]
        metrics.increment.assert_any_call("notepress.upload_success_total")
        metrics.increment.assert_any_call(
            "notepress.upload_failure_total", tags={"code": "IMAGE_NOT_FOUND"},
        )

    def test_upload_error_is_skipped(self, vault, tmp_path):
        (tmp_path / "a.png").write_bytes(PNG)
        api = media_api(NotepressUploadError(message="rejected"))
        image_map, warnings = upload_images(api, vault, "post.md", "![[a.png]]")
        assert image_map == {}
        assert warnings[0].message == "Image 'a.png' was not uploaded: rejected"

    def test_response_without_source_url_is_skipped(self, vault, tmp_path):
        (tmp_path / "a.png").write_bytes(PNG)
        api = media_api({"id": 1})
        image_map, warnings = upload_images(api, vault, "post.md", "![[a.png]]")
        assert image_map == {}
        assert warnings[0].context["error_code"] == "UPLOAD_ERROR"

    @pytest.mark.parametrize("media_id", ["abc", None, [1]])
    def test_invalid_media_id_is_skipped(self, vault, tmp_path, media_id):
        (tmp_path / "a.png").write_bytes(PNG)
        (tmp_path / "b.png").write_bytes(PNG)
        api = media_api(
            {"id": media_id, "source_url": "https://cdn.example.com/a.png"},
            {"id": 2, "source_url": "https://cdn.example.com/b.png"},
        )
        image_map, warnings = upload_images(api, vault, "post.md", "![[a.png]] ![[b.png]]")
        assert list(image_map) == ["b.png"]
        assert warnings[0].context["error_code"] == "UPLOAD_ERROR"
        assert "invalid id" in warnings[0].message


class TestAsyncUploadImages:
    @pytest.mark.asyncio
    async def test_uploads_sequentially(self, vault, tmp_path):
        (tmp_path / "a.png").write_bytes(PNG)
        (tmp_path / "b.gif").write_bytes(b"GIF89a")
        api = MagicMock()
        api.upload = AsyncMock(side_effect=[
            {"id": 1, "source_url": "https://cdn.example.com/a.png"},
            {"id": 2, "source_url": "https://cdn.example.com/b.gif"},
        ])

        image_map, warnings = await async_upload_images(api, vault, "post.md", "![[a.png]]\n![[b.gif]]")

        assert [img.media_id for img in image_map.values()] == [1, 2]
        assert warnings == []
        assert [c.args[2] for c in api.upload.await_args_list] == ["image/png", "image/gif"]
