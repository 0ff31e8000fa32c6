"""Shared test fixtures."""

from pathlib import Path

import pytest
from docshelf.config import (
    Config,
    DocsConfig,
    FetchConfig,
    HighlightConfig,
    LiveReloadConfig,
    ServerConfig,
)
from docshelf.core.navigation import DEFAULT_NAVIGATION, Navigation


def write_default_docs(source_dir: Path) -> None:
    """Write one document per default navigation entry, titled by its label."""
    for entry in Navigation(DEFAULT_NAVIGATION).entries():
        path = source_dir / entry.document.lstrip("/")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"# {entry.label}\n\nAbout {entry.label}.\n", encoding="utf-8")


@pytest.fixture
def docs_dir(tmp_path: Path) -> Path:
    """Create docs directory holding every default document."""
    source_dir = tmp_path / "public"
    source_dir.mkdir(exist_ok=True)
    write_default_docs(source_dir)
    return source_dir


@pytest.fixture
def test_config(tmp_path: Path, docs_dir: Path) -> Config:
    """Create a test configuration with tmp_path directories."""
    return Config(
        server=ServerConfig(),
        docs=DocsConfig(source_dir=docs_dir, cache_dir=tmp_path / ".cache"),
        highlight=HighlightConfig(),
        fetch=FetchConfig(),
        live_reload=LiveReloadConfig(enabled=False),
    )
