from __future__ import annotations

from adapters.commands import HELP_TEXT, CommandHandler, parse_command
from core.blocklist import BLOCK_NAMESPACE, BlockRegistry
from core.config import Subscription
from core.cursor import CURSOR_NAMESPACE, CursorStore
from core.push import PushOrchestrator
from fakes import FakeClock, FakeStorage, photo_url

NOW = 1_700_000_000


class NoFetcher:
    async def fetch(self, source_id: str, since_timestamp: int):
        raise AssertionError("commands never fetch")


def _handler(admins=()) -> tuple[CommandHandler, FakeStorage]:
    storage = FakeStorage()
    orchestrator = PushOrchestrator(
        NoFetcher(), CursorStore(storage), BlockRegistry(storage), clock=FakeClock(NOW)
    )
    subscriptions = {
        "42": Subscription(subscriber="42", follows=("artblog", "photoblog"), alias="Home"),
        "7": Subscription(subscriber="7", follows=()),
    }
    return CommandHandler(orchestrator, subscriptions, admins), storage


def test_parse_command_strips_bot_mention() -> None:
    assert parse_command("/GoBack@relay_bot 3600") == ("goback", ["3600"])
    assert parse_command("hello") is None
    assert parse_command("/") is None


def test_goback_rewinds_chat_cursor() -> None:
    handler, storage = _handler()

    reply = handler.handle("42", "/goback 3600")

    assert storage.get(CURSOR_NAMESPACE, "42") == NOW - 3600
    assert str(NOW - 3600) in reply


def test_goback_errors_are_replied_not_raised() -> None:
    handler, storage = _handler()

    assert handler.handle("42", "/goback 99999999999") == "Back too long!"
    assert "Usage" in handler.handle("42", "/goback")
    assert "Not a number" in handler.handle("42", "/goback soon")
    assert storage.data == {}


def test_block_without_source_applies_to_every_followed_source() -> None:
    handler, storage = _handler()

    reply = handler.handle("42", f"/block {photo_url('abcfrag')}")

    assert reply.splitlines() == ["artblog@abcfrag blocked.", "photoblog@abcfrag blocked."]
    assert storage.get(BLOCK_NAMESPACE, "artblog@abcfrag") is True
    assert storage.get(BLOCK_NAMESPACE, "photoblog@abcfrag") is True


def test_block_with_explicit_source() -> None:
    handler, storage = _handler()

    assert handler.handle("7", f"/block {photo_url('abcfrag')} artblog") == "artblog@abcfrag blocked."
    assert list(storage.data) == [(BLOCK_NAMESPACE, "artblog@abcfrag")]


def test_block_unrecognized_caption_replies_once() -> None:
    handler, storage = _handler()

    assert handler.handle("42", "/block tmblr.co/x") == "Unrecognized image caption."
    assert storage.data == {}


def test_block_needs_a_source() -> None:
    handler, _ = _handler()

    assert "follows no sources" in handler.handle("7", f"/block {photo_url('abcfrag')}")


def test_follows_and_help() -> None:
    handler, _ = _handler()

    assert handler.handle("42", "/follows").splitlines() == [
        "Home (42) follows:",
        "- artblog",
        "- photoblog",
    ]
    assert handler.handle("99", "/follows") == "This chat has no subscription."
    assert handler.handle("42", "/help") == HELP_TEXT
    assert handler.handle("42", "/unknown") is None


def test_authorization() -> None:
    open_handler, _ = _handler()
    assert open_handler.is_authorized(1, None)

    handler, _ = _handler(admins=["1001", "@Operator"])
    assert handler.is_authorized(1001)
    assert handler.is_authorized(5, "operator")
    assert not handler.is_authorized(5, "someone")
    assert not handler.is_authorized(None)
