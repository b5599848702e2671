# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Write generated Cargo projects to disk.

Every run replaces an output tree wholesale: the directory is removed and
written again, so files from earlier runs never linger. This includes the
logic module and its test, which are not preserved across runs.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ctogen.codegen.contract import ContractArtifact
from ctogen.codegen.logic import LogicArtifact
from ctogen.codegen.plain_data import emit_plain_data
from ctogen.compiler.errors import CompilerError
from ctogen.compiler.registry import ModelRegistry
from ctogen.logging import get_logger

logger = get_logger(__name__)

# Namespaces with this prefix are Concerto system models and are not re-exported.
SYSTEM_MODULE_PREFIX = "concerto"

# ###############
# Public Interface
# ###############


def emit_models_project(
    output_dir: Path,
    registry: ModelRegistry,
    logic: LogicArtifact | None,
    package_name: str = "concerto-models",
    protected: Path | None = None,
) -> list[Path]:
    """Write the serde data crate.

    Args:
        output_dir: Project root; replaced entirely.
        registry: Validated registry whose namespaces become modules.
        logic: The logic scaffold, or None to omit ``logic.rs`` and its test.
        package_name: Cargo package name.
        protected: A directory that must survive, typically the archives root.

    Returns:
        The written files, in write order.

    Raises:
        CompilerError: With stage ``emit`` if *output_dir* contains
            *protected* or a file cannot be written.
    """
    _reset_directory(output_dir, protected)
    src_dir = output_dir / "src"
    crate_name = package_name.replace("-", "_")
    written = [_write(output_dir / "Cargo.toml", _MODELS_CARGO_TOML.format(package_name=package_name))]

    namespace_files = emit_plain_data(registry)
    for filename, text in namespace_files.items():
        written.append(_write(src_dir / filename, text))
    modules = [filename.removesuffix(".rs") for filename in namespace_files]

    written.append(_write(src_dir / "lib.rs", _render_lib_rs(modules, logic is not None)))
    written.append(_write(src_dir / "main.rs", _render_main_rs(crate_name, registry.namespaces())))
    written.append(_write(src_dir / "utils.rs", _UTILS_RS))
    if logic is not None:
        written.append(_write(src_dir / "logic.rs", logic.render_logic_rs()))
        written.append(_write(output_dir / "tests" / "logic.rs", logic.render_test_rs()))
    written.append(_write(output_dir / "README.md", _render_models_readme(package_name, registry.namespaces())))

    logger.info("Wrote %d file(s) to %s", len(written), output_dir)
    return written


def emit_contract_project(
    output_dir: Path,
    contract: ContractArtifact,
    protected: Path | None = None,
) -> list[Path]:
    """Write the ink! contract crate.

    Args:
        output_dir: Project root; replaced entirely.
        contract: The synthesized contract.
        protected: A directory that must survive, typically the archives root.

    Returns:
        The written files, in write order.

    Raises:
        CompilerError: With stage ``emit`` if *output_dir* contains
            *protected* or a file cannot be written.
    """
    _reset_directory(output_dir, protected)
    written = [
        _write(output_dir / "Cargo.toml", contract.render_cargo_toml()),
        _write(output_dir / "src" / "lib.rs", contract.render_lib_rs()),
        _write(output_dir / "README.md", contract.render_readme()),
    ]
    logger.info("Wrote %d file(s) to %s", len(written), output_dir)
    return written


# ################
# Implementation
# ################


def _reset_directory(output_dir: Path, protected: Path | None) -> None:
    """Remove *output_dir* and create it empty, unless that would delete *protected*."""
    if protected is not None:
        target = output_dir.resolve()
        guarded = protected.resolve()
        if guarded == target or guarded.is_relative_to(target):
            raise CompilerError(
                "emit",
                f"refusing to replace a directory that contains '{protected}'",
                artifact=str(output_dir),
            )
    try:
        if output_dir.exists():
            logger.debug("Removing previous output %s", output_dir)
            shutil.rmtree(output_dir)
        output_dir.mkdir(parents=True)
    except OSError as exc:
        raise CompilerError("emit", f"cannot prepare output directory: {exc}", artifact=str(output_dir)) from exc


def _write(path: Path, text: str) -> Path:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise CompilerError("emit", f"cannot write file: {exc}", artifact=str(path)) from exc
    logger.debug("Wrote %s", path)
    return path


def _render_lib_rs(modules: list[str], has_logic: bool) -> str:
    user_modules = [m for m in modules if not m.startswith(SYSTEM_MODULE_PREFIX)]
    system_modules = [m for m in modules if m.startswith(SYSTEM_MODULE_PREFIX)]
    lines = [
        "//! Generated Concerto models.",
        "//!",
        "//! Rust structs and enums generated from Concerto model files by ctogen.",
        "//! All types implement Serialize and Deserialize for JSON compatibility.",
        "",
    ]
    lines.extend(f"pub mod {module};" for module in modules)
    if has_logic:
        lines.append("pub mod logic;")
    lines.append("pub mod utils;")
    lines.append("")
    lines.extend(f"pub use {module}::*;" for module in user_modules)
    lines.append("pub use utils::*;")
    if system_modules:
        lines.append("")
        lines.append("// Concerto system modules are not re-exported: " + ", ".join(system_modules))
    return "\n".join(lines) + "\n"


def _render_main_rs(crate_name: str, namespaces: list[str]) -> str:
    lines = [
        "//! Lists the namespaces compiled into this crate.",
        "",
        "#![allow(unused_imports)]",
        "",
        f"use {crate_name}::*;",
        "",
        "fn main() {",
        '    println!("Concerto models");',
        '    println!("Available namespaces:");',
    ]
    lines.extend(f'    println!("  - {namespace}");' for namespace in namespaces)
    lines.append("}")
    return "\n".join(lines) + "\n"


def _render_models_readme(package_name: str, namespaces: list[str]) -> str:
    lines = [
        f"# {package_name}",
        "",
        "Rust data types generated from Concerto model files by ctogen.",
        "",
        "## Namespaces",
        "",
    ]
    lines.extend(f"- `{namespace}`" for namespace in namespaces)
    lines.extend(
        [
            "",
            "## Building",
            "",
            "```bash",
            "cargo build",
            "cargo test",
            "```",
            "",
            "## Project Structure",
            "",
            "- `src/lib.rs`: exports all namespace modules",
            "- `src/<namespace>.rs`: one module per Concerto namespace",
            "- `src/logic.rs`: business logic stub (regenerated on every run)",
            "- `src/utils.rs`: DateTime and JSON helpers",
            "- `tests/logic.rs`: smoke test for the business logic (regenerated on every run)",
            "",
            "Types keep the model's property names in JSON through `serde(rename)`,",
            "and DateTime fields use `chrono::DateTime<Utc>`.",
        ]
    )
    return "\n".join(lines) + "\n"


_MODELS_CARGO_TOML = """\
[package]
name = "{package_name}"
version = "0.1.0"
edition = "2021"
description = "Generated Rust models from Concerto schema files"
license = "Apache-2.0"

[dependencies]
serde = {{ version = "1.0", features = ["derive"] }}
chrono = {{ version = "0.4", features = ["serde"] }}
serde_json = "1.0"
tokio = {{ version = "1.0", features = ["macros", "rt-multi-thread"] }}
"""

_UTILS_RS = """\
//! Helpers shared by the generated models.

use chrono::{DateTime, SecondsFormat, Utc};

/// Formats a timestamp the way Concerto serializes DateTime values.
pub fn format_datetime(value: &DateTime<Utc>) -> String {
    value.to_rfc3339_opts(SecondsFormat::Millis, true)
}

/// Parses an RFC 3339 timestamp into UTC.
pub fn parse_datetime(value: &str) -> Result<DateTime<Utc>, chrono::ParseError> {
    DateTime::parse_from_rfc3339(value).map(|dt| dt.with_timezone(&Utc))
}

/// Serializes a value to pretty-printed JSON.
pub fn to_json<T: serde::Serialize>(value: &T) -> serde_json::Result<String> {
    serde_json::to_string_pretty(value)
}

/// Deserializes a value from JSON.
pub fn from_json<'a, T: serde::Deserialize<'a>>(json: &'a str) -> serde_json::Result<T> {
    serde_json::from_str(json)
}
"""
