"""A small client for the Telegram Bot HTTP API and the markup the bot sends."""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

log = logging.getLogger(__name__)

API_ROOT = "https://api.telegram.org"
RETRY_PAUSE = 3.0


class TelegramError(Exception):
    """The Bot API refused a request or answered with something unreadable."""

    def __init__(self, description: str, error_code: int = 0) -> None:
        super().__init__(f"telegram error {error_code}: {description}")
        self.description = description
        self.error_code = error_code


@dataclass(frozen=True)
class Message:
    """A chat message, with the message it replies to if any."""

    message_id: int
    chat_id: int
    text: str = ""
    reply_to: Message | None = None


@dataclass(frozen=True)
class CallbackQuery:
    """A press on an inline keyboard button."""

    id: str
    data: str = ""
    message: Message | None = None


def _message(data: Any) -> Message | None:
    if not isinstance(data, Mapping):
        return None
    chat = data.get("chat") or {}
    return Message(
        message_id=int(data.get("message_id", 0)),
        chat_id=int(chat.get("id", 0)),
        text=data.get("text") or "",
        reply_to=_message(data.get("reply_to_message")),
    )


def _callback(data: Any) -> CallbackQuery | None:
    if not isinstance(data, Mapping):
        return None
    return CallbackQuery(
        id=str(data.get("id", "")),
        data=data.get("data") or "",
        message=_message(data.get("message")),
    )


@dataclass(frozen=True)
class Update:
    """One incoming event: a message or a callback query."""

    update_id: int
    message: Message | None = None
    callback_query: CallbackQuery | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Update:
        return cls(
            update_id=int(data.get("update_id", 0)),
            message=_message(data.get("message")),
            callback_query=_callback(data.get("callback_query")),
        )


def reply_keyboard(rows: Iterable[Iterable[str]]) -> dict[str, Any]:
    """A custom reply keyboard whose buttons send their own text."""
    return {"keyboard": [[{"text": text} for text in row] for row in rows]}


def inline_keyboard(rows: Iterable[Iterable[tuple[str, str]]]) -> dict[str, Any]:
    """An inline keyboard of (label, callback data) buttons."""
    return {
        "inline_keyboard": [
            [{"text": text, "callback_data": data} for text, data in row] for row in rows
        ]
    }


def force_reply() -> dict[str, Any]:
    """Markup that makes the client open a reply to the sent message."""
    return {"force_reply": True}


class TelegramClient:
    """Calls Bot API methods for one bot token; the token is checked on creation."""

    def __init__(self, token: str, transport: httpx.BaseTransport | None = None) -> None:
        self._http = httpx.Client(
            base_url=f"{API_ROOT}/bot{token}/",
            transport=transport,
            timeout=30.0,
        )
        me = self._call("getMe")
        self.username: str = (me or {}).get("username", "")

    def _call(
        self,
        method: str,
        *,
        json: Mapping[str, Any] | None = None,
        data: Mapping[str, Any] | None = None,
        files: Mapping[str, Any] | None = None,
        timeout: float | None = None,
    ) -> Any:
        options: dict[str, Any] = {}
        if json is not None:
            options["json"] = dict(json)
        if data is not None:
            options["data"] = dict(data)
        if files is not None:
            options["files"] = dict(files)
        if timeout is not None:
            options["timeout"] = timeout
        response = self._http.post(method, **options)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TelegramError(
                f"unexpected response to {method}", response.status_code
            ) from exc
        if not isinstance(payload, Mapping) or not payload.get("ok"):
            description = "request failed"
            code = response.status_code
            if isinstance(payload, Mapping):
                description = payload.get("description", description)
                code = payload.get("error_code", code)
            raise TelegramError(description, int(code))
        return payload.get("result")

    def send_message(
        self,
        chat_id: int,
        text: str,
        reply_markup: Mapping[str, Any] | None = None,
        parse_mode: str | None = None,
    ) -> Message:
        body: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_markup is not None:
            body["reply_markup"] = reply_markup
        if parse_mode:
            body["parse_mode"] = parse_mode
        result = _message(self._call("sendMessage", json=body))
        if result is None:
            raise TelegramError("sendMessage returned no message")
        return result

    def edit_message_text(
        self,
        chat_id: int,
        message_id: int,
        text: str,
        reply_markup: Mapping[str, Any] | None = None,
    ) -> Message | None:
        body: dict[str, Any] = {"chat_id": chat_id, "message_id": message_id, "text": text}
        if reply_markup is not None:
            body["reply_markup"] = reply_markup
        return _message(self._call("editMessageText", json=body))

    def answer_callback_query(self, callback_id: str, text: str = "") -> bool:
        body: dict[str, Any] = {"callback_query_id": callback_id}
        if text:
            body["text"] = text
        return bool(self._call("answerCallbackQuery", json=body))

    def send_photo(self, chat_id: int, filename: str, data: bytes) -> Message:
        result = _message(
            self._call(
                "sendPhoto",
                data={"chat_id": str(chat_id)},
                files={"photo": (filename, data, "image/png")},
            )
        )
        if result is None:
            raise TelegramError("sendPhoto returned no message")
        return result

    def get_updates(self, offset: int = 0, timeout: int = 60) -> list[Update]:
        result = self._call(
            "getUpdates",
            json={"offset": offset, "timeout": timeout},
            timeout=timeout + 10.0,
        )
        items: Sequence[Any] = result or []
        return [Update.from_dict(item) for item in items if isinstance(item, Mapping)]

    def iter_updates(self, timeout: int = 60) -> Iterator[Update]:
        """Long-poll for updates forever, pausing after failed polls."""
        offset = 0
        while True:
            try:
                updates = self.get_updates(offset, timeout)
            except (TelegramError, httpx.HTTPError):
                log.exception("failed to get updates, retrying in %s seconds", RETRY_PAUSE)
                time.sleep(RETRY_PAUSE)
                continue
            for update in updates:
                offset = max(offset, update.update_id + 1)
                yield update

    def close(self) -> None:
        self._http.close()