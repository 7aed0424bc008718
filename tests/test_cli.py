"""CLI integration tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from change_detection import traversal
from change_detection.cli import main


def _make_tree(root: Path) -> None:
    """Create a minimal build-script project tree for testing."""
    (root / "build.rs").write_text("fn main() {}\n")
    static = root / "static"
    static.mkdir()
    (static / "a.txt").write_text("a\n")
    (static / "b.tmp").write_text("b\n")
    css = static / "css"
    css.mkdir()
    (css / "site.css").write_text("body {}\n")


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    _make_tree(tmp_path)
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _render_help(capsys: pytest.CaptureFixture[str]) -> str:
    with pytest.raises(SystemExit) as exc:
        main(["--help"])
    assert exc.value.code == 0
    return capsys.readouterr().out


def test_help_includes_tagline_and_usage(capsys: pytest.CaptureFixture[str]) -> None:
    out = _render_help(capsys)
    assert "change-detection: Emit build-script rerun-if-changed directives" in out
    assert "Common usage:" in out
    assert "change-detection --exclude '*.tmp' static" in out


def test_directives_for_paths(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["static", "build.rs"]) == 0
    assert capsys.readouterr().out == (
        "cargo:rerun-if-changed=build.rs\n"
        "cargo:rerun-if-changed=static/a.txt\n"
        "cargo:rerun-if-changed=static/b.tmp\n"
        "cargo:rerun-if-changed=static/css/site.css\n"
    )


def test_exclude_pattern(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--exclude", "*.tmp", "--exclude", "css/", "static"]) == 0
    assert capsys.readouterr().out == "cargo:rerun-if-changed=static/a.txt\n"


def test_include_patterns_are_alternatives(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["--include", "*.css", "--include", "*.rs", "static", "build.rs"]) == 0
    assert capsys.readouterr().out == (
        "cargo:rerun-if-changed=build.rs\ncargo:rerun-if-changed=static/css/site.css\n"
    )


def test_prefix_and_watch_directories(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--prefix", "cargo:", "--watch-directories", "static/css"]) == 0
    assert capsys.readouterr().out == (
        "cargo::rerun-if-changed=static/css\ncargo::rerun-if-changed=static/css/site.css\n"
    )


def test_list_files(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-files", "--exclude", "*.tmp", "static"]) == 0
    assert capsys.readouterr().out == "static/a.txt\nstatic/css/site.css\n"


def test_missing_path_is_configuration_error(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["static", "no/such/file"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error: Path not found: no/such/file" in captured.err


def test_invalid_pattern(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--exclude", "!*.tmp", "static"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Error:" in captured.err


def test_no_paths(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 1
    assert "No paths specified" in capsys.readouterr().err


def test_traversal_io_error_exit_code(
    project: Path, capsys: pytest.CaptureFixture[str], monkeypatch: pytest.MonkeyPatch
) -> None:
    real_scandir = os.scandir

    def flaky_scandir(path):
        if Path(path).name == "css":
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(traversal.os, "scandir", flaky_scandir)
    assert main(["static"]) == 2
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Cannot list directory" in captured.err


def test_paths_from_config(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (project / "change-detection.toml").write_text(
        'paths = ["static", "build.rs"]\nexclude = ["*.tmp", "css/"]\n'
    )
    assert main([]) == 0
    assert capsys.readouterr().out == (
        "cargo:rerun-if-changed=build.rs\ncargo:rerun-if-changed=static/a.txt\n"
    )


def test_cli_flags_override_config(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (project / "pyproject.toml").write_text(
        '[tool.change-detection]\npaths = ["static"]\nprefix = "cargo:"\n'
    )
    assert main(["--prefix", "cargo", "build.rs"]) == 0
    assert capsys.readouterr().out == "cargo:rerun-if-changed=build.rs\n"


def test_no_config(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (project / "change-detection.toml").write_text('paths = ["static"]\nprefix = "cargo:"\n')
    assert main(["--no-config", "build.rs"]) == 0
    assert capsys.readouterr().out == "cargo:rerun-if-changed=build.rs\n"


def test_explicit_config_file(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = project / "watch.toml"
    config.write_text('paths = ["build.rs"]\n')
    assert main(["--config", str(config)]) == 0
    assert capsys.readouterr().out == "cargo:rerun-if-changed=build.rs\n"


def test_explicit_config_file_missing(project: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--config", "missing.toml", "build.rs"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Config file not found" in captured.err


def test_verbose_summary_goes_to_stderr(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    assert main(["-v", "build.rs"]) == 0
    captured = capsys.readouterr()
    assert captured.out == "cargo:rerun-if-changed=build.rs\n"
    assert "1 paths from 1 roots" in captured.err


@pytest.mark.skipif(
    sys.platform != "linux", reason="needs a filesystem that allows non-UTF-8 names"
)
def test_non_utf8_file_name_emits_nothing(
    project: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    (project / "static" / os.fsdecode(b"z\xff")).write_text("z\n")
    assert main(["--no-config", "static"]) == 1
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "UTF-8" in captured.err
