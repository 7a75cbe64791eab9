"""Application entry point for the telerelay bot."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Mapping, Optional, Union

from art import tprint
from telethon import events

import settings
from adapters.commands import CommandHandler
from adapters.http_client import UrllibHttpClient
from adapters.notification_formatting import format_subscriber_label
from adapters.sqlite_storage import SQLiteStorage
from adapters.telegram_transport import TelethonTransport
from client import build_client
from core.blocklist import BlockRegistry
from core.config import FetcherConfig, Subscription
from core.cursor import CursorStore
from core.dedup import TTLCache
from core.dispatcher import DeliveryDispatcher
from core.errors import ConfigurationError
from core.push import PushOrchestrator
from core.timeline import TimelineFetcher
from logging_setup import configure_logging

NAME = "TELERELAY"
FONT = "tarty-1"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


def _recipient(subscriber: str) -> Union[int, str]:
    # Numeric ids address chats directly; anything else is a username.
    if subscriber.lstrip("-").isdigit():
        return int(subscriber)
    return subscriber


class _Relay:
    """The wired pipeline for one process."""

    def __init__(self, client, storage: SQLiteStorage) -> None:
        self.cache = TTLCache(settings.DEDUP.ttl_seconds)
        blocklist = BlockRegistry(storage)
        fetcher = TimelineFetcher(
            http=UrllibHttpClient(timeout=settings.HTTP_TIMEOUT_SECONDS),
            cache=self.cache,
            blocklist=blocklist,
            config=FetcherConfig(api_key=settings.TUMBLR_API_KEY, api_url=settings.API_URL),
        )
        self.orchestrator = PushOrchestrator(fetcher, CursorStore(storage), blocklist)
        self.dispatcher = DeliveryDispatcher(TelethonTransport(client), settings.DELIVERY)
        self.commands = CommandHandler(self.orchestrator, settings.SUBSCRIPTIONS, settings.ADMINS)


async def _poll_cycle(relay: _Relay, subscriptions: Mapping[str, Subscription]) -> None:
    logger = logging.getLogger(__name__)
    for subscription in subscriptions.values():
        label = format_subscriber_label(subscription)
        messages = await relay.orchestrator.push_for(subscription.subscriber, subscription.follows)
        if not messages:
            logger.debug("Nothing new for %s", label)
            continue
        outcomes = await relay.dispatcher.deliver_all(_recipient(subscription.subscriber), messages)
        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info("Delivered %s/%s message(s) to %s", len(outcomes) - failed, len(outcomes), label)


async def _poll_loop(relay: _Relay) -> None:
    logger = logging.getLogger(__name__)
    while True:
        try:
            await _poll_cycle(relay, settings.SUBSCRIPTIONS)
        except Exception:
            logger.exception("Poll cycle failed")
        await asyncio.sleep(settings.POLL_INTERVAL_SECONDS)


async def _purge_loop(cache: TTLCache) -> None:
    logger = logging.getLogger(__name__)
    while True:
        await asyncio.sleep(settings.DEDUP.purge_seconds)
        removed = cache.purge_expired()
        logger.info("Dedup purge removed %s entries", removed)


def _start(client) -> None:
    if not settings.BOT_TOKEN:
        raise ConfigurationError("BOT_TOKEN is required in the environment")
    client.start(bot_token=settings.BOT_TOKEN)


def _open_storage() -> SQLiteStorage:
    storage = SQLiteStorage(settings.DB_PATH)
    storage.init_db()
    return storage


def _run() -> None:
    _print_banner()
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    logger = logging.getLogger(__name__)

    logger.info("Starting telerelay")
    if not settings.TUMBLR_API_KEY:
        logger.warning("TUMBLR_API_KEY is not set; every fetch will fail")

    storage = _open_storage()
    client = build_client(settings.PROJECT_ROOT)
    _start(client)
    relay = _Relay(client, storage)
    logger.info("%s subscriptions are loaded", len(settings.SUBSCRIPTIONS))

    # Commands are the only inbound surface; everything else is polling.
    @client.on(events.NewMessage(incoming=True, pattern=r"^/"))
    async def handler(event) -> None:
        try:
            sender = await event.get_sender()
            if not relay.commands.is_authorized(event.sender_id, getattr(sender, "username", None)):
                logger.info("Ignoring command from unauthorized sender %s", event.sender_id)
                return
            reply = relay.commands.handle(str(event.chat_id), event.raw_text)
            if reply:
                await event.reply(reply)
        except Exception:
            logger.exception("Error while handling command")

    client.loop.create_task(_poll_loop(relay))
    client.loop.create_task(_purge_loop(relay.cache))

    logger.info("Client connected. Polling every %s seconds...", settings.POLL_INTERVAL_SECONDS)
    client.run_until_disconnected()


def _push_once(subscriber: str) -> None:
    configure_logging(settings.LOGGING, settings.PROJECT_ROOT)
    subscription = settings.SUBSCRIPTIONS.get(subscriber)
    if subscription is None:
        raise SystemExit(f"Unknown subscriber: {subscriber}")

    storage = _open_storage()
    client = build_client(settings.PROJECT_ROOT)
    _start(client)
    relay = _Relay(client, storage)

    async def _run_push() -> None:
        await _poll_cycle(relay, {subscriber: subscription})
        await client.disconnect()

    client.loop.run_until_complete(_run_push())


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="telerelay")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the relay")
    push_parser = subparsers.add_parser("push", help="Run one push cycle for a subscriber and exit")
    push_parser.add_argument("subscriber", help="Subscriber chat id as configured in config.json")

    args = parser.parse_args(argv)
    if args.command == "push":
        _push_once(args.subscriber)
        return
    _run()


if __name__ == "__main__":
    main()
