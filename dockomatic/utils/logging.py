"""
Package-level logging configuration.

structlog events are handed to the standard library and rendered per
handler:

* rich console (key/value rendering, level chosen by ``-v``/``--debug``);
* rotating JSON log file in ``$DOCKOMATIC_LOG_DIR`` or the package-local
  ``logs/`` folder, one JSON object per line whatever the console shows;
* optional plain-text mirror controlled via ``--save-logfile`` on the CLI.

Records from plain :mod:`logging` loggers go through the same formatters.
"""

from __future__ import annotations

import atexit
import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

import structlog
from rich.logging import RichHandler
from structlog.stdlib import LoggerFactory, ProcessorFormatter

__all__ = ["setup_logging", "log_directory"]

_PRE_CHAIN = [
    structlog.processors.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def log_directory() -> Path:
    """Return the directory receiving the rotating JSON log."""
    env_dir = os.environ.get("DOCKOMATIC_LOG_DIR")
    if env_dir:
        return Path(env_dir).expanduser()
    return Path(__file__).resolve().parents[1] / "logs"


def _formatter(renderer) -> ProcessorFormatter:
    return ProcessorFormatter(
        processors=[ProcessorFormatter.remove_processors_meta, renderer],
        foreign_pre_chain=_PRE_CHAIN,
    )


def _json_file_handler(level: int) -> logging.Handler:
    """Return a rotating JSON file handler writing ``dockomatic.log``."""
    logdir = log_directory()
    logdir.mkdir(parents=True, exist_ok=True)

    handler = logging.handlers.RotatingFileHandler(
        filename=logdir / "dockomatic.log",
        maxBytes=5_000_000,  # ~5 MB before rollover
        backupCount=3,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    return handler


def _plain_text_file_handler(
    path: Optional[Path], level: int
) -> logging.Handler | None:
    """Return a plain-text file handler or *None* when *path* is *None*."""
    if path is None:
        return None

    path = path.expanduser().resolve()
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8", mode="a")
    handler.setLevel(level)
    handler.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=False)))
    atexit.register(handler.close)
    return handler


def setup_logging(
    *,
    verbose: bool = False,
    debug: bool = False,
    extra_text_log: Optional[Path] = None,
) -> None:
    """Configure rich console logging and the file mirrors.

    Args:
        verbose: Emit INFO-level messages to the console.
        debug: Emit DEBUG-level messages plus rich tracebacks.
        extra_text_log: Optional path for a plain-text mirror of console output.
    """
    console_lvl = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    file_lvl = logging.DEBUG if debug else logging.INFO

    console = RichHandler(
        level=console_lvl,
        rich_tracebacks=debug,
        tracebacks_show_locals=False,
        show_time=False,
        show_level=False,
        markup=False,
    )
    console.setFormatter(_formatter(structlog.dev.ConsoleRenderer(colors=False)))
    handlers: list[logging.Handler] = [console, _json_file_handler(file_lvl)]

    txt_handler = _plain_text_file_handler(extra_text_log, console_lvl)
    if txt_handler:
        handlers.append(txt_handler)

    logging.basicConfig(
        level=logging.DEBUG,  # root logger stays at DEBUG
        handlers=handlers,
        force=True,
    )

    structlog.configure(
        processors=[*_PRE_CHAIN, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(min(console_lvl, file_lvl)),
        logger_factory=LoggerFactory(),
    )
