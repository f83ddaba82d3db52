"""
Logging setup for the library and the b256sum CLI:
- Rich console for humans (default), on stderr so digests stay clean on stdout.
- Optional rotating file logs.
- Optional JSON logs.
- Thread-safe QueueHandler/QueueListener (the CLI hashes files in workers).

Usage:
    from logs import init_logging, get_logger

    init_logging(level="INFO", to_file=True, json=False)
    log = get_logger(__name__)
    log.info("hello")

Env vars:
    B256_LOG_LEVEL   = DEBUG|INFO|WARNING|ERROR (default WARNING)
    B256_LOG_JSON    = 0|1  (default 0)
    B256_LOG_TO_FILE = 0|1  (default 0)
    B256_LOG_FILE    = path to log file (default .b256/logs/b256.log)
"""

from __future__ import annotations

import atexit
import json
import logging
import os
import queue
import sys
from dataclasses import dataclass
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


# ------------ Config model ------------


@dataclass
class LogConfig:
    level: str = "WARNING"
    json: bool = False
    to_file: bool = False
    file_path: Path = Path(".b256/logs/b256.log")
    max_bytes: int = 2 * 1024 * 1024  # 2 MB per file
    backup_count: int = 2
    app_name: str = "b256"


# ------------ Globals ------------

_CONSOLE = Console(stderr=True, highlight=False, soft_wrap=True)
_QUEUE: Optional[queue.Queue] = None
_QUEUE_HANDLER: Optional[QueueHandler] = None
_LISTENER: Optional[QueueListener] = None
_INITIALIZED = False


# ------------ Formatters ------------


class JsonFormatter(logging.Formatter):
    """One JSON object per record; keys stay stable for ingestion."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "level": record.levelname,
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "logger": record.name,
            "msg": record.getMessage(),
            "thread": record.threadName,
            "file": record.filename,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "0").strip().lower() in ("1", "true", "yes")


def _resolve_config(
    level: Optional[str],
    json_out: Optional[bool],
    to_file: Optional[bool],
    file_path: Optional[Path],
    app_name: str,
) -> LogConfig:
    """Arguments win over env vars; env vars win over defaults."""
    return LogConfig(
        level=(level or os.getenv("B256_LOG_LEVEL") or "WARNING").upper(),
        json=json_out if json_out is not None else _env_flag("B256_LOG_JSON"),
        to_file=to_file if to_file is not None else _env_flag("B256_LOG_TO_FILE"),
        file_path=Path(
            os.getenv("B256_LOG_FILE") or (file_path or LogConfig.file_path)
        ),
        app_name=app_name,
    )


def _build_sinks(cfg: LogConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []

    if cfg.json:
        console_handler = logging.StreamHandler(stream=sys.stderr)
        console_handler.setFormatter(JsonFormatter())
        handlers.append(console_handler)
    else:
        rich_handler = RichHandler(
            console=_CONSOLE, show_time=False, show_path=False, markup=True
        )
        rich_handler.setFormatter(logging.Formatter("%(message)s"))
        handlers.append(rich_handler)

    if cfg.to_file:
        try:
            cfg.file_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                cfg.file_path,
                maxBytes=cfg.max_bytes,
                backupCount=cfg.backup_count,
                encoding="utf-8",
            )
        except OSError as exc:
            # File sink is optional.
            _CONSOLE.print(f"[yellow]File logging disabled:[/] {exc}")
        else:
            file_handler.setFormatter(
                JsonFormatter()
                if cfg.json
                else logging.Formatter(
                    "%(asctime)s %(levelname)s %(name)s: %(message)s"
                )
            )
            handlers.append(file_handler)

    return handlers


# ------------ Initialization ------------


def init_logging(
    level: Optional[str] = None,
    *,
    json: Optional[bool] = None,
    to_file: Optional[bool] = None,
    file_path: Optional[Path] = None,
    app_name: str = "b256",
) -> None:
    """
    Initialize process-wide logging. Safe to call multiple times (idempotent).

    - Installs a QueueHandler on the app logger (not root: this is also a library).
    - Starts a QueueListener with configured sinks (console/file).
    - Honors env vars when arguments are not provided.
    """
    global _INITIALIZED, _QUEUE, _QUEUE_HANDLER, _LISTENER

    if _INITIALIZED:
        return

    cfg = _resolve_config(level, json, to_file, file_path, app_name)

    app_logger = logging.getLogger(cfg.app_name)
    app_logger.setLevel(getattr(logging, cfg.level, logging.WARNING))
    app_logger.propagate = False

    _QUEUE = queue.Queue(-1)
    _QUEUE_HANDLER = QueueHandler(_QUEUE)
    app_logger.addHandler(_QUEUE_HANDLER)

    _LISTENER = QueueListener(
        _QUEUE, *_build_sinks(cfg), respect_handler_level=True
    )
    _LISTENER.start()
    atexit.register(shutdown_logging)

    _INITIALIZED = True


def shutdown_logging() -> None:
    """Flush and detach the sinks; `init_logging()` may be called again after."""
    global _INITIALIZED, _QUEUE, _QUEUE_HANDLER, _LISTENER

    if _LISTENER is not None:
        _LISTENER.stop()
        _LISTENER = None
    if _QUEUE_HANDLER is not None:
        for lg in logging.Logger.manager.loggerDict.values():
            if isinstance(lg, logging.Logger) and _QUEUE_HANDLER in lg.handlers:
                lg.removeHandler(_QUEUE_HANDLER)
        _QUEUE_HANDLER = None
    _QUEUE = None
    _INITIALIZED = False


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the "b256" namespace. Library modules log through
    it silently until the CLI (or the host application) calls `init_logging()`.
    """
    if not name or name == "b256":
        return logging.getLogger("b256")
    if name.startswith("b256."):
        return logging.getLogger(name)
    return logging.getLogger(f"b256.{name}")
