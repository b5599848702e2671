# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for the check and build workflow."""

import shutil
from pathlib import Path

import pytest

from ctogen.compiler.build import build_workspace, check_workspace
from ctogen.compiler.errors import CompilerError
from ctogen.workspace.config import WorkspaceConfig

DATA_DIR = Path(__file__).parent.parent / "data"

# ###############
# Test Helpers
# ###############


def _workspace(tmp_path: Path) -> Path:
    """Copy the fixture archives into a fresh workspace and return its root."""
    shutil.copytree(DATA_DIR / "archives", tmp_path / "archives")
    return tmp_path


def _relative(root: Path, paths: list[Path]) -> list[str]:
    return [p.relative_to(root).as_posix() for p in paths]


def _snapshot(root: Path) -> dict[str, str]:
    return {p.relative_to(root).as_posix(): p.read_text() for p in sorted(root.rglob("*")) if p.is_file()}


# ###############
# Check
# ###############


class TestCheckWorkspace:
    def test_fixture(self, tmp_path: Path) -> None:
        result = check_workspace(_workspace(tmp_path), WorkspaceConfig())
        assert len(result.load.documents) == 5
        assert [d.name for d in result.classified.template_models] == ["LateDeliveryAndPenaltyClause"]
        assert all(d.stage in ("load", "classify") for d in result.diagnostics)

    def test_check_writes_nothing(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        check_workspace(root, WorkspaceConfig())
        assert not (root / "output").exists()
        assert not (root / "contract").exists()

    def test_empty_workspace(self, tmp_path: Path) -> None:
        result = check_workspace(tmp_path, WorkspaceConfig())
        messages = [d.message for d in result.diagnostics]
        assert "no archives found" in messages
        assert "no classifiable declarations found" in messages
        assert (tmp_path / "archives").is_dir()

    def test_custom_archives_directory(self, tmp_path: Path) -> None:
        shutil.copytree(DATA_DIR / "archives", tmp_path / "models")
        config = WorkspaceConfig(archives_directory="models")
        assert len(check_workspace(tmp_path, config).load.documents) == 5


# ###############
# Build
# ###############


class TestBuildWorkspace:
    def test_all_targets(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        result = build_workspace(root, WorkspaceConfig())
        assert _relative(root, result.written) == [
            "output/Cargo.toml",
            "output/src/org_accordproject_contract_0_2_0.rs",
            "output/src/org_accordproject_money_0_3_0.rs",
            "output/src/org_accordproject_runtime_0_2_0.rs",
            "output/src/org_accordproject_time_0_3_0.rs",
            "output/src/io_clause_latedeliveryandpenalty_0_1_0.rs",
            "output/src/lib.rs",
            "output/src/main.rs",
            "output/src/utils.rs",
            "output/src/logic.rs",
            "output/tests/logic.rs",
            "output/README.md",
            "contract/Cargo.toml",
            "contract/src/lib.rs",
            "contract/README.md",
        ]
        assert all(p.is_file() for p in result.written)
        assert result.contract is not None
        assert result.contract.contract_name == "LateDeliveryAndPenaltyContract"
        assert result.logic is not None

    def test_models_target_only(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        result = build_workspace(root, WorkspaceConfig(), target="models")
        assert result.contract is None
        assert (root / "output" / "src" / "logic.rs").is_file()
        assert not (root / "contract").exists()

    def test_contract_target_only(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        result = build_workspace(root, WorkspaceConfig(), target="contract")
        assert result.logic is None
        assert (root / "contract" / "src" / "lib.rs").is_file()
        assert not (root / "output").exists()

    def test_contract_name_override(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        result = build_workspace(root, WorkspaceConfig(contract_name="PenaltyContract"), target="contract")
        assert result.contract is not None
        cargo = (root / "contract" / "Cargo.toml").read_text()
        assert 'name = "penalty-contract"' in cargo

    def test_package_name(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        build_workspace(root, WorkspaceConfig(package_name="penalty-models"), target="models")
        assert 'name = "penalty-models"' in (root / "output" / "Cargo.toml").read_text()
        assert "use penalty_models::logic::trigger;" in (root / "output" / "tests" / "logic.rs").read_text()

    def test_regeneration_removes_stale_files(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        stale = root / "output" / "src" / "old_namespace.rs"
        stale.parent.mkdir(parents=True)
        stale.write_text("// stale")
        build_workspace(root, WorkspaceConfig(), target="models")
        assert not stale.exists()

    def test_regeneration_is_deterministic(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        build_workspace(root, WorkspaceConfig())
        first = _snapshot(root)
        build_workspace(root, WorkspaceConfig())
        second = _snapshot(root)
        assert first == second

    def test_archives_are_never_replaced(self, tmp_path: Path) -> None:
        root = _workspace(tmp_path)
        with pytest.raises(CompilerError) as exc_info:
            build_workspace(root, WorkspaceConfig(output_directory="."))
        assert exc_info.value.stage == "emit"
        assert (root / "archives" / "late-delivery-and-penalty" / "model" / "model.cto").is_file()

    def test_model_without_template_model(self, tmp_path: Path) -> None:
        model_dir = tmp_path / "archives" / "plain" / "model"
        model_dir.mkdir(parents=True)
        (model_dir / "money.cto").write_text(
            (DATA_DIR / "archives" / "late-delivery-and-penalty" / "model" / "money.cto").read_text()
        )
        result = build_workspace(tmp_path, WorkspaceConfig())
        assert result.logic is None
        assert result.contract is not None
        assert result.contract.contract_name == "ConcertoContract"
        stages = {d.stage for d in result.diagnostics}
        assert {"logic", "synthesize"} <= stages
        assert not (tmp_path / "output" / "src" / "logic.rs").exists()
        assert "pub mod logic;" not in (tmp_path / "output" / "src" / "lib.rs").read_text()

    def test_invalid_model_fails_before_writing(self, tmp_path: Path) -> None:
        model_dir = tmp_path / "archives" / "broken" / "model"
        model_dir.mkdir(parents=True)
        (model_dir / "model.cto").write_text("namespace a.b\nconcept A { o Missing m }\n")
        with pytest.raises(CompilerError) as exc_info:
            build_workspace(tmp_path, WorkspaceConfig())
        assert exc_info.value.stage == "register"
        assert not (tmp_path / "output").exists()
