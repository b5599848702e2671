# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""End-to-end compiler workflow: load, classify, synthesize, and emit.

The stages run strictly in sequence. A fatal problem in any stage raises
:class:`~ctogen.compiler.errors.CompilerError` naming the stage; every
non-fatal finding is collected as a
:class:`~ctogen.compiler.errors.Diagnostic` and returned to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ctogen.codegen.contract import ContractArtifact, synthesize_contract
from ctogen.codegen.logic import LogicArtifact, synthesize_logic
from ctogen.codegen.project import emit_contract_project, emit_models_project
from ctogen.compiler.classifier import ClassifiedModel, classify
from ctogen.compiler.errors import Diagnostic
from ctogen.compiler.loader import LoadResult, load_models
from ctogen.logging import get_logger
from ctogen.workspace.config import WorkspaceConfig

logger = get_logger(__name__)

Target = Literal["models", "contract", "all"]

# ###############
# Public Interface
# ###############


@dataclass
class CheckResult:
    """Outcome of loading and classifying a workspace without emitting anything."""

    load: LoadResult
    classified: ClassifiedModel
    diagnostics: list[Diagnostic] = field(default_factory=list)


@dataclass
class BuildResult:
    """Outcome of a full build.

    Attributes:
        check: The load and classification results the build started from.
        contract: The synthesized contract, when the contract target ran.
        logic: The logic scaffold, when the models target ran and the model
            has a template model, a request and a response.
        written: Every file written, in write order.
        diagnostics: All non-fatal findings of the run.
    """

    check: CheckResult
    contract: ContractArtifact | None = None
    logic: LogicArtifact | None = None
    written: list[Path] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def check_workspace(root: Path, config: WorkspaceConfig) -> CheckResult:
    """Load, validate, and classify the archives of a workspace.

    Args:
        root: Workspace root directory.
        config: The workspace configuration.

    Returns:
        A :class:`CheckResult`.

    Raises:
        CompilerError: If loading, registration, or validation fails.
    """
    loaded = load_models(
        config.resolve(root, config.archives_directory),
        extension=config.model_extension,
        ordering=config.ordering,
    )
    classified = classify(loaded.registry, config.classification)
    diagnostics = [*loaded.diagnostics, *classified.diagnostics]
    if not classified.all_declarations():
        diagnostics.append(Diagnostic("classify", "archives", "no classifiable declarations found"))
    return CheckResult(load=loaded, classified=classified, diagnostics=diagnostics)


def build_workspace(root: Path, config: WorkspaceConfig, target: Target = "all") -> BuildResult:
    """Run the full pipeline and write the requested projects.

    Args:
        root: Workspace root directory.
        config: The workspace configuration.
        target: ``models`` for the data crate, ``contract`` for the ink!
            crate, or ``all`` for both.

    Returns:
        A :class:`BuildResult`.

    Raises:
        CompilerError: If any stage fails fatally.
    """
    checked = check_workspace(root, config)
    result = BuildResult(check=checked, diagnostics=list(checked.diagnostics))
    archives_root = config.resolve(root, config.archives_directory)

    if target in ("models", "all"):
        result.logic, logic_diagnostics = synthesize_logic(
            checked.classified, checked.load.registry, config.package_name
        )
        result.diagnostics.extend(logic_diagnostics)
        result.written.extend(
            emit_models_project(
                config.resolve(root, config.output_directory),
                checked.load.registry,
                result.logic,
                package_name=config.package_name,
                protected=archives_root,
            )
        )

    if target in ("contract", "all"):
        result.contract = synthesize_contract(checked.classified, config.contract_name)
        if result.contract.template_model is None:
            result.diagnostics.append(
                Diagnostic(
                    "synthesize",
                    result.contract.contract_name,
                    "no template model found; generated a minimal contract",
                )
            )
        result.written.extend(
            emit_contract_project(
                config.resolve(root, config.contract_directory),
                result.contract,
                protected=archives_root,
            )
        )

    logger.info("Build finished: %d file(s) written", len(result.written))
    return result
