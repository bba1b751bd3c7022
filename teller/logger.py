"""
Structured JSON logging for the teller desk.

Every record is emitted as one JSON line.  Anything in the message or in
the caller-supplied ``extra`` fields that looks like a full card number is
redacted by the formatter, so a stray PAN can never reach stdout or the
rotating log file.
"""

import json
import logging
import re
import sys
from collections.abc import Mapping
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO

# 13-19 digits, optionally grouped by single spaces or dashes.
_PAN_LIKE = re.compile(r"(?<![\w-])\d(?:[ -]?\d){12,18}(?![\w-])")
_REDACTED = "[REDACTED PAN]"

_RESERVED_ATTRS: frozenset[str] = frozenset(
    vars(logging.makeLogRecord({})).keys()
) | {"message", "asctime"}


def redact_card_numbers(text: str) -> str:
    """Replace every PAN-like digit run in *text*."""
    return _PAN_LIKE.sub(_REDACTED, text)


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``timestamp`` (UTC ISO-8601), ``level``, ``logger_name``,
    ``message`` and, when present, ``extra`` (caller context, stringified)
    and ``exception`` (formatted traceback).
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": redact_card_numbers(record.getMessage()),
        }

        context = {
            key: redact_card_numbers(str(value))
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS
        }
        if context:
            entry["extra"] = context

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = redact_card_numbers(record.exc_text)

        return json.dumps(entry, ensure_ascii=False)


def _file_handler(
    log_file: str, max_bytes: int, backup_count: int,
) -> Optional[RotatingFileHandler]:
    """Rotating handler for *log_file*, or ``None`` when it cannot be opened."""
    path = Path(log_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            filename=str(path),
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as exc:
        sys.stderr.write(f"teller: cannot open log file {log_file!r} ({exc}); console only\n")
        return None


class StructuredLogger:
    """Injectable wrapper around a named ``logging.Logger``.

    Services and repositories receive one of these through their
    constructor::

        log = StructuredLogger(name="teller.search")
        log.info("Search executed", extra={"results": 3})

    Handler settings not passed explicitly come from ``AppConfig``.  An
    empty ``log_file`` means console output only.  Loggers sharing a name
    share handlers, so constructing the same name twice is harmless.
    """

    def __init__(
        self,
        name: str = "teller",
        level: int = logging.INFO,
        stream: Optional[TextIO] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
        context: Optional[Mapping[str, object]] = None,
    ) -> None:
        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(level)
        self._context: dict[str, object] = dict(context or {})

        if self._logger.handlers:
            return

        from teller.config import get_config
        cfg = get_config()

        formatter = JSONFormatter()
        handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
        target = cfg.LOG_FILE if log_file is None else log_file
        if target:
            rotating = _file_handler(
                target,
                cfg.LOG_MAX_BYTES if max_bytes is None else max_bytes,
                cfg.LOG_BACKUP_COUNT if backup_count is None else backup_count,
            )
            if rotating is not None:
                handlers.append(rotating)

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def with_context(self, **fields: object) -> "StructuredLogger":
        """Same underlying logger, with *fields* added to every record's extra."""
        bound = StructuredLogger.__new__(StructuredLogger)
        bound._logger = self._logger
        bound._context = {**self._context, **fields}
        return bound

    def _log(self, level: int, msg: str, args: tuple[object, ...], kwargs: dict) -> None:
        if self._context:
            kwargs["extra"] = {**self._context, **(kwargs.get("extra") or {})}
        self._logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._log(logging.CRITICAL, msg, args, kwargs)


def get_logger(name: str = "teller") -> StructuredLogger:
    """``StructuredLogger`` under the ``teller.`` namespace, configured from ``AppConfig``."""
    qualified = name if name == "teller" or name.startswith("teller.") else f"teller.{name}"
    return StructuredLogger(name=qualified)
