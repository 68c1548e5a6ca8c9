"""Operational logging for check runs."""

from __future__ import annotations

import logging

LOGGER_NAME = "workspace_check"
KERNEL_LOGGER_NAME = "checkkit"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def setup_operational_logger(*, verbose: bool = False, stream=None) -> logging.Logger:
    """
    Configure the run logger: stderr only, INFO by default and DEBUG when verbose.
    The check report itself goes to stdout, so the two never interleave in pipes.
    The kernel logger (`checkkit.*`, e.g. launch failures in the runner) shares the handler.
    """

    level = logging.DEBUG if verbose else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT)

    stream_handler = logging.StreamHandler(stream)
    stream_handler.setLevel(level)
    stream_handler.setFormatter(formatter)

    for name in (LOGGER_NAME, KERNEL_LOGGER_NAME):
        configured = logging.getLogger(name)
        configured.setLevel(level)
        configured.handlers.clear()
        configured.addHandler(stream_handler)
        configured.propagate = False

    return logging.getLogger(LOGGER_NAME)
