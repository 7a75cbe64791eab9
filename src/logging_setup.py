"""Logging setup for the relay process.

Log lines can carry the feed URL, which embeds the Tumblr API key, so every
handler masks the secrets named in the config before writing.
"""

from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Iterable, Mapping, Optional

DEFAULT_SECRET_VARS = ("BOT_TOKEN", "TUMBLR_API_KEY", "API_HASH")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
MASK = "***"


class SecretMaskingFormatter(logging.Formatter):
    """Formatter that replaces known secret values in the rendered line."""

    def __init__(self, secrets: Iterable[str], fmt: str = LOG_FORMAT, datefmt: Optional[str] = DATE_FORMAT) -> None:
        super().__init__(fmt=fmt, datefmt=datefmt)
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        for secret in self._secrets:
            line = line.replace(secret, MASK)
        return line


def secret_values(config: Mapping) -> list[str]:
    """Read the values of the environment variables that must never be logged."""

    redact = config.get("redact", {})
    if not redact.get("enabled", True):
        return []
    names = redact.get("patterns", DEFAULT_SECRET_VARS)
    return [os.environ[name] for name in names if os.environ.get(name)]


def _file_handler(file_cfg: Mapping, root: str) -> logging.Handler:
    path = file_cfg.get("path", "logs/telerelay.log")
    if not os.path.isabs(path):
        path = os.path.join(root, path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    return RotatingFileHandler(
        path,
        maxBytes=int(file_cfg.get("max_bytes", 5 * 1024 * 1024)),
        backupCount=int(file_cfg.get("backup_count", 5)),
        encoding="utf-8",
    )


def build_handlers(config: Mapping, root: str) -> list[logging.Handler]:
    """Create the console and rotating-file handlers the config enables."""

    formatter = SecretMaskingFormatter(secret_values(config))
    handlers: list[logging.Handler] = []
    if config.get("console", True):
        handlers.append(logging.StreamHandler())
    file_cfg = config.get("file", {})
    if file_cfg.get("enabled", False):
        handlers.append(_file_handler(file_cfg, root))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(config: Optional[Mapping], root: str) -> None:
    config = config or {}
    if not config.get("enabled", True):
        return
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    handlers = build_handlers(config, root)
    if handlers:
        logging.basicConfig(level=level, handlers=handlers)
