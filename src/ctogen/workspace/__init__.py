# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Workspace configuration for ctogen."""

from ctogen.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    find_workspace_config,
    load_workspace_config,
    save_workspace_config,
)

__all__ = [
    "CONFIG_FILE_NAME",
    "WorkspaceConfig",
    "WorkspaceConfigError",
    "find_workspace_config",
    "load_workspace_config",
    "save_workspace_config",
]
