"""Shared formatting helpers for bot replies and log lines.

Keeping formatting here prevents drift between the command handlers and the
poll loop.
"""

from __future__ import annotations

from datetime import datetime, timezone

from core.config import Subscription


def format_subscriber_label(subscription: Subscription) -> str:
    """Return a human-friendly subscriber label, using the configured alias."""

    if not subscription.alias:
        return subscription.subscriber
    return f"{subscription.alias} ({subscription.subscriber})"


def format_cursor(timestamp: int) -> str:
    """Render a cursor as a UTC timestamp next to its raw value."""

    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return f"{moment.strftime('%H:%M:%S %d-%m-%Y')} UTC ({timestamp})"


def format_follows(subscription: Subscription) -> str:
    """Return the followed sources of a subscription, one per line."""

    label = format_subscriber_label(subscription)
    if not subscription.follows:
        return f"{label} follows no sources."
    lines = [f"{label} follows:"]
    lines.extend(f"- {source}" for source in subscription.follows)
    return "\n".join(lines)
