# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the ctogen command-line interface."""

import argparse
import logging
import sys
from pathlib import Path

from yachalk import chalk

from ctogen.compiler.build import build_workspace, check_workspace
from ctogen.compiler.errors import CompilerError, Diagnostic
from ctogen.logging import configure_logging
from ctogen.workspace.config import (
    CONFIG_FILE_NAME,
    WorkspaceConfig,
    WorkspaceConfigError,
    find_workspace_config,
    save_workspace_config,
)

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the ctogen CLI."""
    parser = argparse.ArgumentParser(
        prog="ctogen",
        description="ctogen: compile Concerto models into Rust data types and ink! contracts",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log pipeline progress to stderr",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # init subcommand
    init_parser = subparsers.add_parser(
        "init",
        help="Initialize a new ctogen workspace",
        description=f"Write a default {CONFIG_FILE_NAME} and create the archives directory.",
    )
    init_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory to initialize the workspace in (default: current directory)",
    )

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Load, validate, and classify the models",
        description="Load every archive, validate the models, and report how declarations were classified.",
    )
    check_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the ctogen workspace (default: current directory)",
    )
    check_parser.add_argument("--archives", help="Archives directory (overrides the workspace config)")

    # generate subcommand
    generate_parser = subparsers.add_parser(
        "generate",
        help="Generate the Rust projects",
        description="Generate the serde data crate, the ink! contract crate, or both.",
    )
    generate_parser.add_argument(
        "directory",
        nargs="?",
        default=".",
        help="Directory containing the ctogen workspace (default: current directory)",
    )
    generate_parser.add_argument(
        "--target",
        choices=["models", "contract", "all"],
        default="all",
        help="Which project to generate (default: all)",
    )
    generate_parser.add_argument("--archives", help="Archives directory (overrides the workspace config)")
    generate_parser.add_argument("--output", help="Data crate output directory (overrides the workspace config)")
    generate_parser.add_argument(
        "--contract-output",
        help="Contract crate output directory (overrides the workspace config)",
    )
    generate_parser.add_argument("--contract-name", help="Contract name (overrides the derived name)")

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "init":
        return _cmd_init(args)
    if args.command == "check":
        return _cmd_check(args)
    if args.command == "generate":
        return _cmd_generate(args)
    return 0


def _error(message: str) -> None:
    print(chalk.red(f"Error: {message}"), file=sys.stderr)


def _print_diagnostics(diagnostics: list[Diagnostic]) -> None:
    for diagnostic in diagnostics:
        print(chalk.yellow(f"Warning: {diagnostic}"))


def _load_config(directory: Path, args: argparse.Namespace) -> WorkspaceConfig | None:
    """Load the workspace config and apply command-line overrides."""
    try:
        config = find_workspace_config(directory)
    except WorkspaceConfigError as exc:
        _error(str(exc))
        return None
    overrides = {
        "archives_directory": getattr(args, "archives", None),
        "output_directory": getattr(args, "output", None),
        "contract_directory": getattr(args, "contract_output", None),
        "contract_name": getattr(args, "contract_name", None),
    }
    return config.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def _cmd_init(args: argparse.Namespace) -> int:
    """Handle the init subcommand."""
    directory = Path(args.directory).resolve()

    if not directory.exists():
        _error(f"directory '{directory}' does not exist.")
        return 1

    config_file = directory / CONFIG_FILE_NAME
    if config_file.exists():
        _error(f"workspace already exists at '{config_file}'.")
        return 1

    config = WorkspaceConfig()
    try:
        save_workspace_config(config, config_file)
    except WorkspaceConfigError as exc:
        _error(str(exc))
        return 1
    config.resolve(directory, config.archives_directory).mkdir(parents=True, exist_ok=True)
    print(chalk.green(f"Initialized ctogen workspace at '{config_file}'."))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    directory = Path(args.directory).resolve()
    if not directory.exists():
        _error(f"directory '{directory}' does not exist.")
        return 1

    config = _load_config(directory, args)
    if config is None:
        return 1

    try:
        result = check_workspace(directory, config)
    except CompilerError as exc:
        _error(str(exc))
        return 1

    classified = result.classified
    print(f"Loaded {len(result.load.documents)} document(s) from {len(result.load.archives)} archive(s).")
    print(f"  Template models: {', '.join(d.name for d in classified.template_models) or '-'}")
    print(f"  Requests:        {', '.join(d.name for d in classified.requests) or '-'}")
    print(f"  Responses:       {', '.join(d.name for d in classified.responses) or '-'}")
    print(f"  Concepts:        {len(classified.concepts)}")
    print(f"  Participants:    {len(classified.participants)}")
    _print_diagnostics(result.diagnostics)
    print(chalk.green("No errors found."))
    return 0


def _cmd_generate(args: argparse.Namespace) -> int:
    """Handle the generate subcommand."""
    directory = Path(args.directory).resolve()
    if not directory.exists():
        _error(f"directory '{directory}' does not exist.")
        return 1

    config = _load_config(directory, args)
    if config is None:
        return 1

    try:
        result = build_workspace(directory, config, target=args.target)
    except CompilerError as exc:
        _error(str(exc))
        return 1

    _print_diagnostics(result.diagnostics)
    for path in result.written:
        try:
            shown = path.relative_to(directory)
        except ValueError:
            shown = path
        print(f"  {shown}")
    print(chalk.green(f"Generated {len(result.written)} file(s)."))
    return 0
