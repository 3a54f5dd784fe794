# -*- coding: utf-8 -*-
"""
GhJSON: A portable JSON representation for visual-programming node
graphs, built around an extensible handler-based conversion engine.
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: Apache-2.0

logger.py
---------
Per-module loggers backed by Python's standard ``logging`` library,
plus a callback bridge so host applications can route conversion
diagnostics into their own UI or report panel.

Quick Start::

    from ghjson.logger import get_logger
    log = get_logger("DataTree")

    log.debug("Decoded %d branches", count)
    log.warning("Malformed tree path '%s', using {}", key)
    log.error("Handler %s failed: %s", handler.name, exc)

All loggers are children of the root ``"GhJSON"`` logger, so a single
handler attached at the root controls all output.

Log Levels (as used by the engine):
    DEBUG    Merge discards, cache rebuilds, skipped read-only properties
    INFO     Preserved unknown extensions, per-node warning summaries
    WARNING  Recoverable conversion issues (bad path, handler failure)
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, List, Callable, Any

# ==============================================================================
# ROOT LOGGER NAME
# ==============================================================================

ROOT_LOGGER_NAME = "GhJSON"

# ==============================================================================
# CUSTOM FORMATTER
# ==============================================================================

class GhJsonFormatter(logging.Formatter):
    """
    Compact ``[Module] LEVEL message`` formatter, with an optional
    timestamp for file output.

    Console output::

        [DataTree] WARN  Malformed tree path '{0;x}', using {}
        [Orchestrator] WARNING Handler 'gh.panel' failed on 'Panel': ...

    File output (with timestamp)::

        2026-02-21 14:30:05 [ValueCodec] INFO  Registered codec 'pointXYZ'
    """

    CONSOLE_FMT = "[%(module_tag)s] %(levelname)-5s %(message)s"
    FILE_FMT    = "%(asctime)s [%(module_tag)s] %(levelname)-5s %(message)s"

    def __init__(self, use_timestamp: bool = False) -> None:
        fmt = self.FILE_FMT if use_timestamp else self.CONSOLE_FMT
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        # "GhJSON.DataTree" → "DataTree"
        if not hasattr(record, "module_tag"):
            record.module_tag = record.name.rsplit(".", 1)[-1]
        return super().format(record)


# ==============================================================================
# CALLBACK BRIDGE
# ==============================================================================

_callback_handler: Optional[logging.Handler] = None


class _CallbackHandler(logging.Handler):
    """
    Logging handler that forwards records to a list of callbacks.

    The callbacks receive ``(level: str, module_tag: str, message: str)``.
    A failing callback never interrupts the conversion that logged.
    """

    def __init__(self) -> None:
        super().__init__()
        self._callbacks: List[Callable] = []

    def add_callback(self, fn: Callable) -> None:
        if fn not in self._callbacks:
            self._callbacks.append(fn)

    def remove_callback(self, fn: Callable) -> None:
        if fn in self._callbacks:
            self._callbacks.remove(fn)

    def emit(self, record: logging.LogRecord) -> None:
        if not self._callbacks:
            return
        try:
            msg = self.format(record)
            tag = getattr(record, "module_tag", record.name.rsplit(".", 1)[-1])
            for cb in list(self._callbacks):
                try:
                    cb(record.levelname, tag, msg)
                except Exception:
                    self.handleError(record)
        except Exception:
            self.handleError(record)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def get_logger(module_tag: str) -> logging.Logger:
    """
    Get a named logger for one engine module.

    Args:
        module_tag: Short identifier (e.g. ``"ValueCodec"``,
                    ``"Orchestrator"``).  Appears in log output as
                    ``[ValueCodec]``.

    Returns:
        A ``logging.Logger`` that is a child of the root ``GhJSON`` logger.
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_tag}")


def setup_logging(
    level: int = logging.INFO,
    stream=None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root GhJSON logger.

    Call this once from the host application.  If never called, Python's
    default behaviour applies (WARNING+ to stderr).

    Args:
        level:    Minimum log level.
        stream:   Output stream for the console handler (default ``sys.stdout``).
        log_file: Optional path to a log file.  A timestamped file handler
                  is added alongside the console handler.

    Returns:
        The root ``GhJSON`` logger.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)

    # Repeated calls must not stack console handlers
    if not any(isinstance(h, logging.StreamHandler)
               and not isinstance(h, logging.FileHandler)
               for h in root.handlers):
        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(level)
        console.setFormatter(GhJsonFormatter(use_timestamp=False))
        root.addHandler(console)

        if log_file:
            fh = logging.FileHandler(log_file, encoding="utf-8")
            fh.setLevel(level)
            fh.setFormatter(GhJsonFormatter(use_timestamp=True))
            root.addHandler(fh)

    return root


def set_log_level(level: int) -> None:
    """Change the level of the root logger and all of its handlers."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def add_log_callback(fn: Callable) -> None:
    """
    Register a callback to receive every GhJSON log message.

    The callback signature is ``fn(level: str, module_tag: str, message: str)``.

    Args:
        fn: Callable to invoke for each log record.
    """
    global _callback_handler
    root = logging.getLogger(ROOT_LOGGER_NAME)

    if _callback_handler is None:
        _callback_handler = _CallbackHandler()
        _callback_handler.setFormatter(GhJsonFormatter(use_timestamp=False))
        root.addHandler(_callback_handler)

    _callback_handler.add_callback(fn)


def remove_log_callback(fn: Callable) -> None:
    """Remove a previously registered log callback."""
    if _callback_handler is not None:
        _callback_handler.remove_callback(fn)


def log_handler_failure(
    log: logging.Logger,
    source: str,
    target: Any,
    exc: BaseException,
    field: Optional[str] = None,
) -> str:
    """
    Log a handler failure with handler identity and node/property context.

    Returns the formatted message so callers can reuse it as a
    conversion warning.
    """
    where = f"'{target}'" if field is None else f"'{target}'.{field}"
    message = f"Handler '{source}' failed on {where}: {type(exc).__name__}: {exc}"
    log.warning(message)
    return message
