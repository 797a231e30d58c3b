from __future__ import annotations

import json
import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

# logger name -> file; records still propagate to app.log
CHANNELS = {
    "smbdash.api": "api.log",
    "smbdash.transactions": "transactions.log",
}

_OWNED = "_smbdash_owned"


class JsonFormatter(logging.Formatter):
    """One JSON object per line; dashboard loads run on worker threads, so the thread is kept."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "where": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _file_handler(path: Path, level: int) -> RotatingFileHandler:
    fh = RotatingFileHandler(path, maxBytes=2_000_000, backupCount=5, encoding="utf-8")
    fh.setFormatter(JsonFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    fh.setLevel(level)
    setattr(fh, _OWNED, True)
    return fh


def _attach(logger: logging.Logger, path: Path, level: int) -> None:
    if not any(getattr(h, _OWNED, False) and getattr(h, "baseFilename", None) == os.path.abspath(path)
               for h in logger.handlers):
        logger.addHandler(_file_handler(path, level))


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> list[Path]:
    """Install the file handlers once per file; returns every log file in use."""
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    _attach(root, logs_dir / "app.log", level)
    _attach(root, logs_dir / "errors.log", logging.ERROR)

    files = [logs_dir / "app.log", logs_dir / "errors.log"]
    for name, filename in CHANNELS.items():
        channel = logging.getLogger(name)
        channel.setLevel(level)
        _attach(channel, logs_dir / filename, level)
        files.append(logs_dir / filename)

    # connection-pool chatter from requests
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    return files


def teardown_logging() -> None:
    for logger in [logging.getLogger(), *(logging.getLogger(n) for n in CHANNELS)]:
        for h in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
            logger.removeHandler(h)
            h.close()
