"""Structured logging for the combat-zone overlay.

structlog renders the records of ordinary ``logging.getLogger(__name__)``
loggers under the ``combatzones`` namespace. Work done on behalf of one
entity runs inside :func:`entity_context`, so every record it emits carries
an ``entity`` field (console, JSON and file output alike).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import structlog

ROOT_LOGGER = "combatzones"


@contextmanager
def entity_context(entity_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``entity=<entity_id>``."""
    with structlog.contextvars.bound_contextvars(entity=entity_id):
        yield


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="%H:%M:%S", utc=False),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _handlers(level: int, log_file: str | None) -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(str(path), encoding="utf-8"))
    for h in handlers:
        h.setLevel(level)
    return handlers


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    log_json: bool = False,
) -> None:
    """Route the ``combatzones`` logger tree through structlog renderers.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path to a log file. ``None`` disables file logging.
        log_json: If True, render log lines as JSON instead of human-readable.

    Calling it again replaces the previous handlers.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    shared = _shared_processors()

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    if log_json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )

    root = logging.getLogger(ROOT_LOGGER)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()
    for h in _handlers(numeric_level, log_file):
        h.setFormatter(formatter)
        root.addHandler(h)
    root.setLevel(numeric_level)
    root.propagate = False


def setup_logging_from_config(system: Mapping[str, Any], **overrides: Any) -> None:
    """Apply ``combat_zones.system`` settings; non-empty ``overrides`` win.

    Recognised keys: ``log_level``, ``log_file``, ``log_json``.
    """
    settings = {
        "level": system.get("log_level", "INFO"),
        "log_file": system.get("log_file"),
        "log_json": bool(system.get("log_json", False)),
    }
    settings.update({k: v for k, v in overrides.items() if v})
    setup_logging(**settings)
