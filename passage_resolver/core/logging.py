"""JSON logging for passage-resolver.

Every module logs through :func:`get_logger`, which hangs one stdout handler
and one rotating file handler off the ``passage_resolver`` logger. Records
carry the correlation id of the resolution that produced them, so a single
``get_content`` call can be followed across parser, store and fetcher lines.
"""

from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator, List, Optional

from pythonjsonlogger import jsonlogger

from passage_resolver.core.config import settings

PACKAGE_LOGGER_NAME = "passage_resolver"

BASE_DIR = Path(__file__).resolve().parent.parent
ROOT_DIR = BASE_DIR.parent

LOG_LEVEL = getattr(logging, str(settings.PASSAGE_RESOLVER_LOG_LEVEL).upper(), logging.INFO)
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 5

_correlation_id: ContextVar[Optional[str]] = ContextVar(
    "passage_resolver_correlation_id", default=None
)


def _log_dir_candidates() -> List[Path]:
    candidates: List[Path] = []
    override = getattr(settings, "PASSAGE_RESOLVER_LOG_DIR", None)
    if override:
        candidates.append(Path(override))
    candidates += [
        ROOT_DIR / "logs",
        Path(getattr(settings, "DATA_DIR", "/data")) / "logs",
        BASE_DIR / "logs",
    ]
    return candidates


def _resolve_logs_dir() -> Path:
    """First creatable directory among override, repo, data dir and package."""
    for candidate in _log_dir_candidates():
        try:
            candidate.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return candidate
    raise PermissionError(
        "no writable logs directory; set PASSAGE_RESOLVER_LOG_DIR to a writable path"
    )


LOGS_DIR = _resolve_logs_dir()
LOG_FILE_PATH = LOGS_DIR / "passage_resolver.log"
LOG_SCHEMA_VERSION = str(settings.PASSAGE_RESOLVER_LOG_SCHEMA_VERSION)


class VersionedJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps ``schema_version`` on every entry."""

    def __init__(self, *args, schema_version: str, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._schema_version = schema_version

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("schema_version", self._schema_version)


class CorrelationIdFilter(logging.Filter):  # pylint: disable=too-few-public-methods
    """Copies the bound correlation id onto each record ("-" when unbound)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "-"
        return True


def bind_correlation_id(value: Optional[str]) -> Token[Optional[str]]:
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[Optional[str]]) -> None:
    _correlation_id.reset(token)


def get_correlation_id() -> Optional[str]:
    return _correlation_id.get()


@contextmanager
def correlation_id_context(value: Optional[str]) -> Iterator[None]:
    """Bind ``value`` for the duration of the block."""
    token = bind_correlation_id(value)
    try:
        yield
    finally:
        reset_correlation_id(token)


def _json_formatter() -> VersionedJsonFormatter:
    return VersionedJsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(correlation_id)s",
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
            "correlation_id": "cid",
        },
        datefmt="%Y-%m-%d %H:%M:%S",
        json_ensure_ascii=False,
        schema_version=LOG_SCHEMA_VERSION,
    )


def _install_handlers(package_logger: logging.Logger) -> None:
    if package_logger.handlers:
        return
    formatter = _json_formatter()
    correlation = CorrelationIdFilter()
    handlers: List[logging.Handler] = [
        logging.StreamHandler(sys.stdout),
        RotatingFileHandler(
            LOG_FILE_PATH,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        ),
    ]
    for handler in handlers:
        handler.addFilter(correlation)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` that propagates to the shared package handlers.

    Names outside the package are nested under it so third-party callers
    still land in the same log file.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    package_logger.setLevel(LOG_LEVEL)
    _install_handlers(package_logger)
    if name == PACKAGE_LOGGER_NAME or name.startswith(f"{PACKAGE_LOGGER_NAME}."):
        return logging.getLogger(name)
    return package_logger.getChild(name)


__all__ = [
    "CorrelationIdFilter",
    "LOG_FILE_PATH",
    "LOG_SCHEMA_VERSION",
    "PACKAGE_LOGGER_NAME",
    "VersionedJsonFormatter",
    "bind_correlation_id",
    "correlation_id_context",
    "get_correlation_id",
    "get_logger",
    "reset_correlation_id",
]
