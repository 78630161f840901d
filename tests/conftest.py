"""
FSHelper Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from fshelper.helper.file_system_helper import FileSystemHelper
from fshelper.utils.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reload settings per test; watch threads must never block interpreter exit."""
    monkeypatch.setenv("WATCHER_PERSISTENT", "false")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def helper(tmp_path: Path) -> FileSystemHelper:
    """Create a helper rooted at the test's temporary directory."""
    return FileSystemHelper(tmp_path)


@pytest.fixture
def sample_tree(tmp_path: Path) -> Path:
    """
    Create a small directory tree.

    Layout:
        a.txt
        b.md
        sub/c.txt
        sub/notes.md
        sub/deep/d.txt
    """
    (tmp_path / "a.txt").write_text("alpha")
    (tmp_path / "b.md").write_text("# bravo")

    sub = tmp_path / "sub"
    sub.mkdir()
    (sub / "c.txt").write_text("charlie")
    (sub / "notes.md").write_text("notes")

    deep = sub / "deep"
    deep.mkdir()
    (deep / "d.txt").write_text("delta")

    return tmp_path
