# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Compiler front end for Concerto models: scanning, parsing, registration, loading, and classification."""

from ctogen.compiler.classifier import ClassifiedModel, classify
from ctogen.compiler.errors import CompilerError, Diagnostic
from ctogen.compiler.loader import LoadResult, discover_archives, load_models, order_documents
from ctogen.compiler.parser import ParseError, parse
from ctogen.compiler.registry import (
    DocumentRegistrationError,
    ModelRegistry,
    ModelValidationError,
    RegistryError,
)
from ctogen.compiler.scanner import LexerError, tokenize
from ctogen.compiler.semantic_analysis import SemanticError, analyze

__all__ = [
    "tokenize",
    "LexerError",
    "parse",
    "ParseError",
    "analyze",
    "SemanticError",
    "ModelRegistry",
    "RegistryError",
    "DocumentRegistrationError",
    "ModelValidationError",
    "discover_archives",
    "order_documents",
    "load_models",
    "LoadResult",
    "classify",
    "ClassifiedModel",
    "CompilerError",
    "Diagnostic",
]
