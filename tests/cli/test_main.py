# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the ctogen CLI entry point."""

import logging
import shutil
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

from ctogen.cli.main import main

DATA_DIR = Path(__file__).parent.parent / "data"

# ###############
# Test Helpers
# ###############


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop the handler main() attaches so it never outlives a captured stream."""
    yield
    logger = logging.getLogger("ctogen")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


def _workspace(tmp_path: Path) -> Path:
    """Create a workspace holding the late delivery fixture archive."""
    shutil.copytree(DATA_DIR / "archives", tmp_path / "archives")
    return tmp_path


def _run(monkeypatch: pytest.MonkeyPatch, *argv: str) -> int:
    monkeypatch.setattr(sys, "argv", ["ctogen", *argv])
    with pytest.raises(SystemExit) as exc_info:
        main()
    return exc_info.value.code


# ###############
# Public Interface
# ###############


def test_main_no_args_prints_help_and_exits(monkeypatch: pytest.MonkeyPatch) -> None:
    """main() with no subcommand prints help and exits with code 0."""
    assert _run(monkeypatch) == 0


# -------- init tests --------


def test_init_creates_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init writes .ctogen.yaml and creates the archives directory."""
    assert _run(monkeypatch, "init", str(tmp_path)) == 0
    config_file = tmp_path / ".ctogen.yaml"
    assert config_file.exists()
    assert "archives-directory: archives" in config_file.read_text()
    assert (tmp_path / "archives").is_dir()


def test_init_default_directory_uses_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init with no directory argument uses the current working directory."""
    monkeypatch.chdir(tmp_path)
    assert _run(monkeypatch, "init") == 0
    assert (tmp_path / ".ctogen.yaml").exists()


def test_init_fails_if_workspace_already_exists(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """init exits with error code 1 when the config file already exists."""
    (tmp_path / ".ctogen.yaml").write_text("package-name: existing\n")
    assert _run(monkeypatch, "init", str(tmp_path)) == 1
    assert "already exists" in capsys.readouterr().err
    assert (tmp_path / ".ctogen.yaml").read_text() == "package-name: existing\n"


def test_init_fails_if_directory_does_not_exist(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """init exits with error code 1 when the target directory does not exist."""
    assert _run(monkeypatch, "init", str(tmp_path / "nonexistent")) == 1


# -------- check tests --------


def test_check_empty_workspace(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """check succeeds on a workspace without documents and warns about it."""
    assert _run(monkeypatch, "check", str(tmp_path)) == 0
    out = capsys.readouterr().out
    assert "Loaded 0 document(s) from 0 archive(s)." in out
    assert "no classifiable declarations found" in out


def test_check_fixture_workspace(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """check loads every document and reports the classification."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "check", str(tmp_path)) == 0
    out = capsys.readouterr().out
    assert "Loaded 5 document(s) from 1 archive(s)." in out
    assert "LateDeliveryAndPenaltyClause" in out
    assert "LateDeliveryAndPenaltyRequest" in out
    assert "No errors found." in out


def test_check_archives_override(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """--archives points check at another archives directory."""
    assert _run(monkeypatch, "check", str(tmp_path), "--archives", str(DATA_DIR / "archives")) == 0
    assert "Loaded 5 document(s) from 1 archive(s)." in capsys.readouterr().out


def test_check_reports_invalid_model(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """check exits with code 1 when a document references an undefined type."""
    model = tmp_path / "archives" / "broken" / "model"
    model.mkdir(parents=True)
    (model / "model.cto").write_text("namespace org.broken@1.0.0\nconcept A { o Missing m }\n")
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    err = capsys.readouterr().err
    assert "Error" in err
    assert "undefined type 'Missing'" in err


def test_check_reports_invalid_config(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """check exits with code 1 when .ctogen.yaml has an unknown key."""
    (tmp_path / ".ctogen.yaml").write_text("unknown-key: 1\n")
    assert _run(monkeypatch, "check", str(tmp_path)) == 1
    assert "Invalid workspace config" in capsys.readouterr().err


def test_check_missing_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """check exits with code 1 when the workspace directory does not exist."""
    assert _run(monkeypatch, "check", str(tmp_path / "nonexistent")) == 1


# -------- generate tests --------


def test_generate_all(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """generate writes both projects and lists the written files."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "generate", str(tmp_path)) == 0
    out = capsys.readouterr().out
    assert "Generated 15 file(s)." in out
    assert (tmp_path / "output" / "Cargo.toml").exists()
    assert (tmp_path / "contract" / "src" / "lib.rs").exists()


def test_generate_models_only(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """--target models skips the contract project."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "generate", str(tmp_path), "--target", "models") == 0
    assert (tmp_path / "output" / "src" / "lib.rs").exists()
    assert not (tmp_path / "contract").exists()


def test_generate_output_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """--output and --contract-output redirect the projects."""
    _workspace(tmp_path)
    code = _run(
        monkeypatch,
        "generate",
        str(tmp_path),
        "--output",
        "rust/models",
        "--contract-output",
        "rust/contract",
    )
    assert code == 0
    assert (tmp_path / "rust" / "models" / "Cargo.toml").exists()
    assert (tmp_path / "rust" / "contract" / "Cargo.toml").exists()


def test_generate_contract_name(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """--contract-name overrides the derived contract name."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "generate", str(tmp_path), "--target", "contract", "--contract-name", "Penalty") == 0
    assert "pub struct Penalty {" in (tmp_path / "contract" / "src" / "lib.rs").read_text()


def test_generate_uses_workspace_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Settings from .ctogen.yaml apply to generate."""
    _workspace(tmp_path)
    (tmp_path / ".ctogen.yaml").write_text("output-directory: crate\npackage-name: penalty-models\n")
    assert _run(monkeypatch, "generate", str(tmp_path), "--target", "models") == 0
    assert 'name = "penalty-models"' in (tmp_path / "crate" / "Cargo.toml").read_text()


def test_generate_refuses_to_replace_archives(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """generate exits with code 1 instead of deleting the archives directory."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "generate", str(tmp_path), "--output", ".") == 1
    assert "refusing to replace" in capsys.readouterr().err
    assert (tmp_path / "archives").is_dir()


def test_generate_verbose_logs_to_stderr(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    """--verbose logs pipeline progress without touching stdout."""
    _workspace(tmp_path)
    assert _run(monkeypatch, "--verbose", "generate", str(tmp_path), "--target", "models") == 0
    captured = capsys.readouterr()
    assert "[INFO] ctogen." in captured.err
    assert "[INFO]" not in captured.out
