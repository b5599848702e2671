# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Tests for the workspace configuration module."""

from pathlib import Path

import pytest

from ctogen.workspace import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    find_workspace_config,
    load_workspace_config,
    save_workspace_config,
)

# ###############
# Helpers
# ###############


def _write_config(tmp_path: Path, content: str) -> Path:
    """Write a workspace config file and return its path."""
    config_file = tmp_path / CONFIG_FILE_NAME
    config_file.write_text(content, encoding="utf-8")
    return config_file


# ###############
# Normal Cases
# ###############


def test_defaults() -> None:
    """A config built without arguments uses the documented defaults."""
    config = WorkspaceConfig()
    assert config.archives_directory == "archives"
    assert config.output_directory == "output"
    assert config.contract_directory == "contract"
    assert config.model_extension == ".cto"
    assert config.package_name == "concerto-models"
    assert config.contract_name is None
    assert config.ordering == "heuristic"
    assert config.classification == "substring"


def test_full_config(tmp_path: Path) -> None:
    """Every hyphenated key is parsed into its attribute."""
    content = """\
archives-directory: models/archives
output-directory: build/models
contract-directory: build/contract
model-extension: .concerto
package-name: penalty-models
contract-name: PenaltyContract
ordering: topological
classification: exact
"""
    config = load_workspace_config(_write_config(tmp_path, content))

    assert config.archives_directory == "models/archives"
    assert config.output_directory == "build/models"
    assert config.contract_directory == "build/contract"
    assert config.model_extension == ".concerto"
    assert config.package_name == "penalty-models"
    assert config.contract_name == "PenaltyContract"
    assert config.ordering == "topological"
    assert config.classification == "exact"


def test_partial_config_keeps_defaults(tmp_path: Path) -> None:
    """Keys that are not given keep their default values."""
    config = load_workspace_config(_write_config(tmp_path, "output-directory: rust\n"))
    assert config.output_directory == "rust"
    assert config.archives_directory == "archives"


def test_empty_file_yields_defaults(tmp_path: Path) -> None:
    """An empty config file is the default configuration."""
    assert load_workspace_config(_write_config(tmp_path, "")) == WorkspaceConfig()


def test_field_names_are_accepted() -> None:
    """Attribute names work alongside the hyphenated aliases."""
    config = WorkspaceConfig(output_directory="rust")
    assert config.output_directory == "rust"


def test_resolve_relative_directory(tmp_path: Path) -> None:
    """Relative directories resolve against the workspace root."""
    config = WorkspaceConfig()
    assert config.resolve(tmp_path, config.archives_directory) == tmp_path / "archives"


def test_resolve_absolute_directory(tmp_path: Path) -> None:
    """Absolute directories are used unchanged."""
    target = tmp_path / "elsewhere"
    assert WorkspaceConfig().resolve(Path("/unused"), str(target)) == target


def test_find_missing_config_yields_defaults(tmp_path: Path) -> None:
    """Without a config file the defaults apply."""
    assert find_workspace_config(tmp_path) == WorkspaceConfig()


def test_find_existing_config(tmp_path: Path) -> None:
    """An existing config file in the root is loaded."""
    _write_config(tmp_path, "package-name: found\n")
    assert find_workspace_config(tmp_path).package_name == "found"


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    """A saved config loads back unchanged and uses hyphenated keys."""
    config = WorkspaceConfig(contract_name="PenaltyContract", ordering="topological")
    path = tmp_path / CONFIG_FILE_NAME
    save_workspace_config(config, path)

    text = path.read_text(encoding="utf-8")
    assert text.startswith("archives-directory: archives\n")
    assert "contract-name: PenaltyContract" in text
    assert load_workspace_config(path) == config


def test_save_omits_unset_contract_name(tmp_path: Path) -> None:
    """The optional contract name is not written when unset."""
    path = tmp_path / CONFIG_FILE_NAME
    save_workspace_config(WorkspaceConfig(), path)
    assert "contract-name" not in path.read_text(encoding="utf-8")


# ###############
# Error Cases
# ###############


def test_missing_file(tmp_path: Path) -> None:
    """Loading a file that does not exist raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="not found"):
        load_workspace_config(tmp_path / CONFIG_FILE_NAME)


def test_invalid_yaml(tmp_path: Path) -> None:
    """Malformed YAML raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="Invalid YAML"):
        load_workspace_config(_write_config(tmp_path, "output-directory: [unclosed\n"))


def test_non_mapping(tmp_path: Path) -> None:
    """A YAML document that is not a mapping raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError, match="must be a YAML mapping"):
        load_workspace_config(_write_config(tmp_path, "- archives\n- output\n"))


def test_unknown_key(tmp_path: Path) -> None:
    """Unknown keys are rejected."""
    with pytest.raises(WorkspaceConfigError, match="Invalid workspace config"):
        load_workspace_config(_write_config(tmp_path, "build-directory: out\n"))


@pytest.mark.parametrize("key", ["ordering", "classification"])
def test_invalid_strategy(tmp_path: Path, key: str) -> None:
    """Strategy settings only accept their documented values."""
    with pytest.raises(WorkspaceConfigError):
        load_workspace_config(_write_config(tmp_path, f"{key}: random\n"))


def test_wrong_value_type(tmp_path: Path) -> None:
    """A list where a directory is expected raises WorkspaceConfigError."""
    with pytest.raises(WorkspaceConfigError):
        load_workspace_config(_write_config(tmp_path, "output-directory:\n  - a\n  - b\n"))
