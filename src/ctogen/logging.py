# Copyright 2026 ctogen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Logging setup shared by all ctogen modules.

Library modules obtain their logger with::

    from ctogen.logging import get_logger
    logger = get_logger(__name__)

and never configure handlers themselves; the CLI calls
:func:`configure_logging` once at start-up.
"""

import logging
import sys
from typing import TextIO

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"

# ###############
# Public Interface
# ###############


def configure_logging(
    level: int = logging.WARNING,
    fmt: str = DEFAULT_FORMAT,
    stream: TextIO | None = None,
) -> None:
    """Attach a stream handler to the ``ctogen`` logger and set its level.

    Calling this more than once only updates the level; no second handler
    is added.

    Args:
        level: Minimum level of records to emit.
        fmt: Format string for the handler.
        stream: Destination stream. Defaults to ``sys.stderr`` so that log
            records never mix with the CLI's result output.
    """
    logger = logging.getLogger("ctogen")
    if not logger.handlers:
        handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)
    logger.setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return the logger for module *name*."""
    return logging.getLogger(name)
