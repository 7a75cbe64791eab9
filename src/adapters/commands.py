"""Chat command adapter.

Maps bot commands to push orchestrator operations so the Telethon handler in
app.py stays a thin shim.
"""

from __future__ import annotations

from typing import Iterable, List, Mapping, Optional, Tuple

from adapters.notification_formatting import format_cursor, format_follows
from core.config import Subscription
from core.errors import InvalidArgumentError
from core.push import PushOrchestrator


HELP_TEXT = "\n".join(
    [
        "/goback <seconds> - re-surface posts from the last <seconds>",
        "/block <image url> [source] - never deliver this image again",
        "/follows - list followed sources",
    ]
)


def parse_command(text: str) -> Optional[Tuple[str, List[str]]]:
    """Split '/name@bot arg1 arg2' into ('name', ['arg1', 'arg2'])."""

    parts = text.strip().split()
    if not parts or not parts[0].startswith("/"):
        return None
    name = parts[0][1:].split("@", 1)[0].lower()
    if not name:
        return None
    return name, parts[1:]


def _normalize_admin(value: str) -> str:
    return str(value).strip().lstrip("@").lower()


class CommandHandler:
    """Executes bot commands on behalf of a chat."""

    def __init__(
        self,
        orchestrator: PushOrchestrator,
        subscriptions: Mapping[str, Subscription],
        admins: Iterable[str] = (),
    ) -> None:
        self._orchestrator = orchestrator
        self._subscriptions = subscriptions
        self._admins = {_normalize_admin(admin) for admin in admins if str(admin).strip()}

    def is_authorized(self, sender_id: Optional[int], sender_username: Optional[str] = None) -> bool:
        """Everyone may command when no admins are configured."""

        if not self._admins:
            return True
        candidates = {_normalize_admin(str(sender_id))} if sender_id is not None else set()
        if sender_username:
            candidates.add(_normalize_admin(sender_username))
        return bool(candidates & self._admins)

    def handle(self, chat_id: str, text: str) -> Optional[str]:
        """Run the command in ``text`` and return the reply, if any."""

        parsed = parse_command(text)
        if parsed is None:
            return None
        name, args = parsed
        try:
            if name == "goback":
                return self._goback(chat_id, args)
            if name == "block":
                return self._block(chat_id, args)
            if name == "follows":
                return self._follows(chat_id)
            if name in {"start", "help"}:
                return HELP_TEXT
        except InvalidArgumentError as exc:
            return str(exc)
        return None

    def _goback(self, chat_id: str, args: List[str]) -> str:
        if len(args) != 1:
            raise InvalidArgumentError("Usage: /goback <seconds>")
        try:
            seconds = int(args[0])
        except ValueError:
            raise InvalidArgumentError(f"Not a number of seconds: {args[0]}") from None
        cursor = self._orchestrator.rewind(chat_id, seconds)
        return f"Cursor moved to {format_cursor(cursor)}."

    def _block(self, chat_id: str, args: List[str]) -> str:
        if not args or len(args) > 2:
            raise InvalidArgumentError("Usage: /block <image url> [source]")
        url = args[0]
        if len(args) == 2:
            sources: Tuple[str, ...] = (args[1],)
        else:
            subscription = self._subscriptions.get(chat_id)
            sources = subscription.follows if subscription else ()
        if not sources:
            raise InvalidArgumentError("This chat follows no sources; name one: /block <image url> <source>")
        replies = [self._orchestrator.block(source, url) for source in sources]
        return "\n".join(dict.fromkeys(replies))

    def _follows(self, chat_id: str) -> str:
        subscription = self._subscriptions.get(chat_id)
        if subscription is None:
            return "This chat has no subscription."
        return format_follows(subscription)
