# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Data model and YAML loader for the ctogen workspace configuration file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# ###############
# Public Interface
# ###############

CONFIG_FILE_NAME = ".ctogen.yaml"


class WorkspaceConfigError(Exception):
    """Raised when a workspace configuration file is invalid or cannot be loaded."""


class WorkspaceConfig(BaseModel):
    """The parsed configuration for a ctogen workspace.

    Directory settings are relative to the workspace root unless absolute.

    Attributes:
        archives_directory: Root holding one directory per archive.
        output_directory: Destination of the serde data crate.
        contract_directory: Destination of the ink! contract crate.
        model_extension: File suffix of schema documents.
        package_name: Cargo package name of the data crate.
        contract_name: Overrides the contract name derived from the template model.
        ordering: Document registration order strategy.
        classification: Supertype matching strategy of the classifier.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    archives_directory: str = Field(alias="archives-directory", default="archives")
    output_directory: str = Field(alias="output-directory", default="output")
    contract_directory: str = Field(alias="contract-directory", default="contract")
    model_extension: str = Field(alias="model-extension", default=".cto")
    package_name: str = Field(alias="package-name", default="concerto-models")
    contract_name: str | None = Field(alias="contract-name", default=None)
    ordering: Literal["heuristic", "topological"] = "heuristic"
    classification: Literal["substring", "exact"] = "substring"

    def resolve(self, root: Path, directory: str) -> Path:
        """Return *directory* resolved against the workspace *root*."""
        path = Path(directory)
        return path if path.is_absolute() else root / path


def load_workspace_config(path: Path) -> WorkspaceConfig:
    """Load and validate a ctogen workspace configuration file.

    An empty file yields the default configuration.

    Args:
        path: Path to the ``.ctogen.yaml`` file.

    Returns:
        A validated WorkspaceConfig.

    Raises:
        WorkspaceConfigError: If the file cannot be read, is not valid YAML,
            or does not conform to the expected schema.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise WorkspaceConfigError(f"Workspace config file not found: {path}") from None
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot read workspace config file: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise WorkspaceConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise WorkspaceConfigError(f"{path}: workspace config must be a YAML mapping")

    try:
        return WorkspaceConfig.model_validate(data)
    except ValidationError as exc:
        raise WorkspaceConfigError(f"Invalid workspace config '{path}': {exc}") from exc


def find_workspace_config(root: Path) -> WorkspaceConfig:
    """Load ``.ctogen.yaml`` from *root*, or return the defaults when it is absent."""
    path = root / CONFIG_FILE_NAME
    if not path.exists():
        return WorkspaceConfig()
    return load_workspace_config(path)


def save_workspace_config(config: WorkspaceConfig, path: Path) -> None:
    """Write *config* as YAML, omitting settings that are unset.

    Raises:
        WorkspaceConfigError: If the file cannot be written.
    """
    data = config.model_dump(by_alias=True, exclude_none=True)
    try:
        path.write_text(yaml.dump(data, default_flow_style=False, sort_keys=False), encoding="utf-8")
    except OSError as exc:
        raise WorkspaceConfigError(f"Cannot write workspace config file '{path}': {exc}") from exc
