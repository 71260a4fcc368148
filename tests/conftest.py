"""Shared test fixtures for the notepress test suite."""

from __future__ import annotations

import pytest

from notepress.config import NotepressConfig
from notepress.converter.md_to_blocks import MarkdownToBlocksConverter
from notepress.vault import LocalVault


@pytest.fixture
def config() -> NotepressConfig:
    """Fully configured test settings pointing at a dummy site."""
    return NotepressConfig(
        site_url="https://blog.example.com",
        username="editor",
        application_password="abcd efgh ijkl mnop",
        publishable_folder="Blog",
    )


@pytest.fixture
def converter(config: NotepressConfig) -> MarkdownToBlocksConverter:
    """Markdown-to-Gutenberg converter using the default test config."""
    return MarkdownToBlocksConverter(config)


@pytest.fixture
def vault(tmp_path) -> LocalVault:
    """An empty vault rooted in a temporary directory."""
    return LocalVault(tmp_path)
