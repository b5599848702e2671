# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Discover schema archives, order their documents, and fill a model registry.

An archives root holds one directory per archive; each archive keeps its
schema documents in a ``model/`` subdirectory::

    archives/
      late-delivery-and-penalty/
        model/
          model.cto
          runtime.cto
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ctogen.compiler.errors import CompilerError, Diagnostic
from ctogen.compiler.graph import detect_cycle, topological_order
from ctogen.compiler.parser import ParseError, parse
from ctogen.compiler.registry import DocumentRegistrationError, ModelRegistry, ModelValidationError
from ctogen.compiler.scanner import LexerError
from ctogen.logging import get_logger
from ctogen.model.schema import Archive, SchemaDocument

logger = get_logger(__name__)

Ordering = Literal["heuristic", "topological"]

MODEL_DIRECTORY = "model"
DEFAULT_EXTENSION = ".cto"

# ###############
# Public Interface
# ###############


@dataclass
class LoadResult:
    """Outcome of loading an archives root.

    Attributes:
        registry: Registry holding every registered namespace, validated.
        archives: Archives discovered, in name order.
        documents: Documents in the order they were registered.
        diagnostics: Non-fatal findings (skipped archives, empty root).
    """

    registry: ModelRegistry
    archives: list[Archive] = field(default_factory=list)
    documents: list[SchemaDocument] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def discover_archives(root: Path, extension: str = DEFAULT_EXTENSION) -> tuple[list[Archive], list[Diagnostic]]:
    """Find every archive below *root* and read its schema documents.

    A missing *root* is created empty. Archives are visited in name order and
    documents in filename order. An archive without a ``model/`` directory is
    skipped with a warning diagnostic.

    Args:
        root: The archives root directory.
        extension: File suffix of schema documents, including the dot.

    Returns:
        The discovered archives and the diagnostics recorded on the way.

    Raises:
        CompilerError: If a document cannot be read.
    """
    diagnostics: list[Diagnostic] = []
    if not root.exists():
        logger.info("Archives directory %s does not exist; creating it", root)
        root.mkdir(parents=True, exist_ok=True)

    archives: list[Archive] = []
    for archive_dir in sorted(p for p in root.iterdir() if p.is_dir()):
        model_dir = archive_dir / MODEL_DIRECTORY
        if not model_dir.is_dir():
            diagnostics.append(
                Diagnostic("load", archive_dir.name, f"no '{MODEL_DIRECTORY}' directory; archive skipped")
            )
            continue
        archive = Archive(name=archive_dir.name, path=archive_dir)
        for doc_path in sorted(p for p in model_dir.iterdir() if p.is_file() and p.suffix == extension):
            try:
                text = doc_path.read_text(encoding="utf-8")
            except OSError as exc:
                raise CompilerError("load", f"cannot read document: {exc}", artifact=str(doc_path)) from exc
            archive.documents.append(
                SchemaDocument(
                    archive=archive.name,
                    filename=doc_path.name,
                    text=text,
                    has_imports=_IMPORT_RE.search(text) is not None,
                )
            )
        logger.debug("Archive %s: %d document(s)", archive.name, len(archive.documents))
        archives.append(archive)

    if not archives:
        diagnostics.append(Diagnostic("load", str(root), "no archives found"))
    return archives, diagnostics


def order_documents(documents: list[SchemaDocument], ordering: Ordering = "heuristic") -> list[SchemaDocument]:
    """Return *documents* in registration order.

    ``heuristic``: documents without an ``import`` statement come first; the
    sort is stable, so discovery order is kept otherwise. This does not
    guarantee that every dependency precedes its dependents.

    ``topological``: each document is parsed for its namespace and imports,
    and documents are ordered so that imported namespaces come first. Imports
    of namespaces outside *documents* are ignored.

    Raises:
        CompilerError: If a document does not parse, or the imports form a
            cycle (``topological`` only).
    """
    if ordering == "heuristic":
        return sorted(documents, key=lambda d: d.has_imports)

    graph: dict[str, list[str]] = {}
    by_key: dict[str, SchemaDocument] = {}
    provided: dict[str, str] = {}
    imports: dict[str, list[str]] = {}
    for index, document in enumerate(documents):
        key = f"{index}:{_document_name(document)}"
        try:
            model_file = parse(document.text)
        except (LexerError, ParseError) as exc:
            raise CompilerError("load", str(exc), artifact=_document_name(document)) from exc
        by_key[key] = document
        provided.setdefault(model_file.namespace, key)
        imports[key] = [imp.namespace for imp in model_file.imports]

    for key, namespaces in imports.items():
        graph[key] = [provided[ns] for ns in namespaces if ns in provided and provided[ns] != key]

    cycle = detect_cycle(graph)
    if cycle is not None:
        raise CompilerError("load", "import cycle: " + " -> ".join(_document_name(by_key[k]) for k in cycle))
    return [by_key[key] for key in topological_order(graph)]


def load_models(
    root: Path,
    extension: str = DEFAULT_EXTENSION,
    ordering: Ordering = "heuristic",
) -> LoadResult:
    """Discover, order, register, and validate every schema document below *root*.

    Args:
        root: The archives root directory.
        extension: File suffix of schema documents.
        ordering: Document ordering strategy (see :func:`order_documents`).

    Returns:
        A :class:`LoadResult` with a validated registry.

    Raises:
        CompilerError: With stage ``register`` when a document fails to
            register (naming the document), ``validate`` when cross-namespace
            validation fails, or ``load`` for unreadable documents and
            import cycles.
    """
    archives, diagnostics = discover_archives(root, extension)
    documents = [doc for archive in archives for doc in archive.documents]
    ordered = order_documents(documents, ordering)

    registry = ModelRegistry()
    for document in ordered:
        name = _document_name(document)
        try:
            registry.register(document.text, name)
        except DocumentRegistrationError as exc:
            raise CompilerError("register", str(exc).removeprefix(f"{name}: "), artifact=name) from exc

    try:
        registry.validate_all()
    except ModelValidationError as exc:
        raise CompilerError("validate", str(exc)) from exc

    logger.info("Loaded %d document(s) from %d archive(s)", len(ordered), len(archives))
    return LoadResult(registry=registry, archives=archives, documents=ordered, diagnostics=diagnostics)


# ################
# Implementation
# ################

_IMPORT_RE = re.compile(r"^\s*import\s", re.MULTILINE)


def _document_name(document: SchemaDocument) -> str:
    return f"{document.archive}/{MODEL_DIRECTORY}/{document.filename}"
