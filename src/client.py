"""Builds the Telethon client the relay logs in with as a bot."""

from __future__ import annotations

import logging
import os

from telethon import TelegramClient

from core.errors import ConfigurationError

LOGGER = logging.getLogger(__name__)


def build_client(session_dir: str = "") -> TelegramClient:
    """Return an unconnected client for the bot session.

    API_ID and API_HASH identify the Telegram application; the .session file
    keeps the bot authorization between restarts and lives in ``session_dir``.
    """

    api_id = os.getenv("API_ID", "").strip()
    api_hash = os.getenv("API_HASH", "").strip()
    if not api_id or not api_hash:
        raise ConfigurationError("API_ID and API_HASH must be set to log the bot in")
    try:
        app_id = int(api_id)
    except ValueError:
        raise ConfigurationError(f"API_ID must be numeric, got {api_id!r}") from None

    session = os.path.join(session_dir, os.getenv("SESSION_NAME", "telerelay"))
    LOGGER.info("Using Telegram session %s", session)
    return TelegramClient(session, app_id, api_hash)
