# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Pipeline-level errors and non-fatal diagnostics."""

from __future__ import annotations

from dataclasses import dataclass

# ###############
# Public Interface
# ###############


class CompilerError(Exception):
    """Raised when a pipeline stage encounters an unrecoverable error.

    Attributes:
        stage: Pipeline stage that failed (``load``, ``register``,
            ``validate``, or ``emit``).
        artifact: Document or output path involved, if any.
    """

    def __init__(self, stage: str, message: str, artifact: str | None = None) -> None:
        prefix = f"[{stage}] {artifact}: " if artifact else f"[{stage}] "
        super().__init__(prefix + message)
        self.stage = stage
        self.artifact = artifact


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding recorded while the pipeline runs.

    Attributes:
        stage: Pipeline stage that recorded the finding.
        subject: Archive, document, or declaration the finding is about.
        message: Human-readable description.
    """

    stage: str
    subject: str
    message: str

    def __str__(self) -> str:
        return f"{self.subject}: {self.message}"
