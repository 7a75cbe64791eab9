"""Static configuration for telerelay.

All user-editable settings (subscriptions, admins, dedup, delivery limits,
logging) live in a single JSON file for quick edits without touching Python.
Secrets stay in the environment.
"""

import json
import os

from dotenv import load_dotenv

from core.config import DEFAULT_API_URL, DedupConfig, DeliveryConfig, Subscription

# Runtime files (config.json, .env, the database, logs, the Telegram session)
# live in the working directory unless TELERELAY_HOME points elsewhere.
PROJECT_ROOT = os.path.abspath(os.getenv("TELERELAY_HOME", os.getcwd()))

CONFIG_PATH = os.getenv("TELERELAY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))

load_dotenv(os.path.join(PROJECT_ROOT, ".env"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_subscriptions(raw_subscriptions: list[dict]) -> dict[str, Subscription]:
    """Build the enabled subscriptions keyed by subscriber chat id."""

    subscriptions: dict[str, Subscription] = {}
    for entry in raw_subscriptions:
        subscriber = entry.get("subscriber")
        if subscriber is None or str(subscriber).strip() == "":
            continue
        if not entry.get("enabled", True):
            continue
        follows = tuple(
            str(source).strip() for source in entry.get("follows", []) if str(source).strip()
        )
        key = str(subscriber).strip()
        subscriptions[key] = Subscription(subscriber=key, follows=follows, alias=entry.get("alias"))
    return subscriptions


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Where to store the SQLite database.
DB_PATH = _CONFIG.get("database") or "telerelay.db"
if not os.path.isabs(DB_PATH):
    DB_PATH = os.path.join(PROJECT_ROOT, DB_PATH)

SUBSCRIPTIONS = _normalize_subscriptions(_CONFIG.get("subscriptions", []))

# Admins may be numeric Telegram ids or usernames; empty means anyone.
ADMINS = [str(admin) for admin in _CONFIG.get("admins", [])]

POLL_INTERVAL_SECONDS = int(_CONFIG.get("poll_interval_seconds", 300))

_dedup = _CONFIG.get("dedup", {})
DEDUP = DedupConfig(
    ttl_hours=float(_dedup.get("ttl_hours", 24)),
    purge_hours=float(_dedup.get("purge_hours", 1)),
)

_delivery = _CONFIG.get("delivery", {})
DELIVERY = DeliveryConfig(
    caption_max_chars=int(_delivery.get("caption_max_chars", 191)),
    max_album_size=int(_delivery.get("max_album_size", 10)),
)

_fetcher = _CONFIG.get("fetcher", {})
API_URL = _fetcher.get("api_url", DEFAULT_API_URL)
HTTP_TIMEOUT_SECONDS = float(_fetcher.get("timeout_seconds", 30))

# Secrets come from .env so they never land in config.json.
TUMBLR_API_KEY = os.getenv("TUMBLR_API_KEY", "")
BOT_TOKEN = os.getenv("BOT_TOKEN", "")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
