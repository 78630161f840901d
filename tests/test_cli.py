"""
Tests for the command line interface.

Requires Python 3.11+.
"""

import json
import sys
import threading
from pathlib import Path

import pytest

from fshelper.cli import main
from fshelper.utils.config import get_settings


class TestCli:
    """Test cases for fshelper subcommands."""

    def test_ls(self, sample_tree: Path, capsys: pytest.CaptureFixture[str]):
        """Test listing with filters and recursion."""
        main(["--root", str(sample_tree), "ls", "--ext", "txt", "--levels", "1", "--files"])

        out = capsys.readouterr().out.split()
        assert sorted(out) == ["a.txt", str(Path("sub") / "c.txt")]

    def test_ls_marks_directories(self, sample_tree: Path, capsys: pytest.CaptureFixture[str]):
        """Test that directories are printed with a trailing slash."""
        main(["--root", str(sample_tree), "ls", "--dirs"])

        assert capsys.readouterr().out.split() == ["sub/"]

    def test_root_from_environment(
        self,
        sample_tree: Path,
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ):
        """Test that FSHELPER_ROOT_PATH is used when --root is absent."""
        monkeypatch.setenv("FSHELPER_ROOT_PATH", str(sample_tree / "sub"))
        get_settings.cache_clear()

        main(["ls", "--files"])

        assert sorted(capsys.readouterr().out.split()) == ["c.txt", "notes.md"]

    def test_cat_json(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        """Test pretty-printing a JSON file."""
        (tmp_path / "data.json").write_text('{"a":[1,2]}')

        main(["--root", str(tmp_path), "cat", "data.json", "--json"])

        assert json.loads(capsys.readouterr().out) == {"a": [1, 2]}

    def test_exec(self, capsys: pytest.CaptureFixture[str]):
        """Test running a command."""
        main(["exec", sys.executable, "-c", "print('x'); print(); print('y')"])

        assert capsys.readouterr().out.split() == ["x", "y"]

    def test_watch_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        """Test that watch exits after the first change of a file that appears."""
        target = tmp_path / "appears.txt"

        timer = threading.Timer(0.2, target.write_text, args=("now",))
        timer.start()
        try:
            main(["--root", str(tmp_path), "watch", "appears.txt", "--file", "--interval", "20"])
        finally:
            timer.cancel()

        assert capsys.readouterr().out.startswith("changed mtime None -> ")

    def test_error_exit(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        """Test that OS errors become a message and exit code 1."""
        with pytest.raises(SystemExit) as excinfo:
            main(["--root", str(tmp_path), "cat", "missing.txt"])

        assert excinfo.value.code == 1
        assert capsys.readouterr().err.startswith("Error:")
