"""Unit tests for the Telegram adapter (no network)."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from telegram.error import BadRequest

from relay_core.agents.orchestrator import InboundTurn
from relay_core.domain.commands import Chat, Clear, View
from relay_core.domain.exceptions import TransportError
from relay_core.transport.telegram_bot import (
    MAX_TELEGRAM_MESSAGE_LEN,
    TelegramRelayBot,
    TelegramResponder,
    is_reply_to_bot,
    turn_from_message,
)

BOT_ID = 123456


class RecordingOrchestrator:
    def __init__(self):
        self.calls = []

    async def handle(self, turn, command, responder):
        self.calls.append((turn, command, responder))


def _message(text, user_id=1, first_name="Alice", reply_to_user_id=None):
    reply_to = None
    if reply_to_user_id is not None:
        reply_to = SimpleNamespace(from_user=SimpleNamespace(id=reply_to_user_id))
    return SimpleNamespace(
        text=text,
        from_user=SimpleNamespace(id=user_id, first_name=first_name),
        reply_to_message=reply_to,
        reply_text=AsyncMock(),
    )


def _update(message):
    return SimpleNamespace(effective_message=message)


def _context(username="AkenoBot"):
    return SimpleNamespace(bot=SimpleNamespace(username=username), error=None)


def test_turn_from_message():
    assert turn_from_message(_message("hi", user_id=9, first_name="Bob")) == InboundTurn(9, "Bob")
    assert turn_from_message(SimpleNamespace(from_user=None)) is None
    assert turn_from_message(None) is None


def test_is_reply_to_bot():
    assert is_reply_to_bot(_message("x", reply_to_user_id=BOT_ID), BOT_ID)
    assert not is_reply_to_bot(_message("x", reply_to_user_id=99), BOT_ID)
    assert not is_reply_to_bot(_message("x"), BOT_ID)


@pytest.mark.anyio
async def test_on_text_wake_word_dispatches_chat():
    orch = RecordingOrchestrator()
    bot = TelegramRelayBot(orch, bot_id=BOT_ID, wake_word="akeno")
    await bot.on_text(_update(_message("Akeno what's up")), _context())
    turn, command, _ = orch.calls[0]
    assert turn == InboundTurn(1, "Alice")
    assert command == Chat("Akeno what's up")


@pytest.mark.anyio
async def test_on_text_reply_to_bot_dispatches_chat():
    orch = RecordingOrchestrator()
    bot = TelegramRelayBot(orch, bot_id=BOT_ID)
    await bot.on_text(_update(_message("tell me more", reply_to_user_id=BOT_ID)), _context())
    assert orch.calls[0][1] == Chat("tell me more")


@pytest.mark.anyio
async def test_on_text_without_trigger_is_ignored():
    orch = RecordingOrchestrator()
    bot = TelegramRelayBot(orch, bot_id=BOT_ID)
    await bot.on_text(_update(_message("just chatting")), _context())
    await bot.on_text(_update(_message("reply to someone", reply_to_user_id=42)), _context())
    assert orch.calls == []


@pytest.mark.anyio
async def test_on_command_parses_and_dispatches():
    orch = RecordingOrchestrator()
    bot = TelegramRelayBot(orch, bot_id=BOT_ID)
    await bot.on_command(_update(_message("/view@AkenoBot")), _context())
    await bot.on_command(_update(_message("/reset")), _context())
    await bot.on_command(_update(_message("/view@SomeoneElse")), _context())
    await bot.on_command(_update(_message("/nope")), _context())
    assert [c[1] for c in orch.calls] == [View(), Clear()]


@pytest.mark.anyio
async def test_responder_replies_and_edits_in_place():
    sent = SimpleNamespace(message_id=77, edit_text=AsyncMock())
    message = _message("hi")
    message.reply_text.return_value = sent

    handle = await TelegramResponder(message).reply("💭")
    await handle.edit("final")

    message.reply_text.assert_awaited_once_with("💭", do_quote=True)
    sent.edit_text.assert_awaited_once_with("final")
    assert handle.message_id == 77


@pytest.mark.anyio
async def test_responder_truncates_long_text():
    message = _message("hi")
    message.reply_text.return_value = SimpleNamespace(message_id=1, edit_text=AsyncMock())
    await TelegramResponder(message).reply("x" * (MAX_TELEGRAM_MESSAGE_LEN + 10))
    text = message.reply_text.await_args.args[0]
    assert len(text) == MAX_TELEGRAM_MESSAGE_LEN
    assert text.endswith("...")


@pytest.mark.anyio
async def test_telegram_errors_become_transport_errors():
    message = _message("hi")
    message.reply_text.side_effect = BadRequest("Chat not found")
    with pytest.raises(TransportError) as exc:
        await TelegramResponder(message).reply("💭")
    assert exc.value.code == "TELEGRAM_SEND_FAILED"

    sent = SimpleNamespace(message_id=1, edit_text=AsyncMock(side_effect=BadRequest("Message is not modified")))
    message = _message("hi")
    message.reply_text.return_value = sent
    handle = await TelegramResponder(message).reply("💭")
    with pytest.raises(TransportError) as exc:
        await handle.edit("same")
    assert exc.value.code == "TELEGRAM_EDIT_FAILED"
