"""Telegram 传输层适配（python-telegram-bot）。

负责：
- 把入站 Update 解码为 InboundTurn 与类型化 Command；
- 实现 Responder/ReplyHandle：以“回复原消息”的方式发送，并支持原地编辑；
- 装配 Application：命令、唤醒词、回复机器人三种触发，每条消息并发处理。

TelegramError 一律包装为 TransportError 向上抛出，由 Application 的错误处理器记录。
"""

from __future__ import annotations

from typing import Optional

from telegram import Message, Update
from telegram.error import TelegramError
from telegram.ext import Application, ContextTypes, MessageHandler, filters

from relay_core.agents.orchestrator import ConversationOrchestrator, InboundTurn
from relay_core.api.service import get_default_orchestrator
from relay_core.config.settings import require_runtime_settings, settings
from relay_core.domain.commands import parse_command, select_chat_trigger
from relay_core.domain.exceptions import ConfigurationError, TransportError
from relay_core.infrastructure.logging.logger import logger

MAX_TELEGRAM_MESSAGE_LEN = 4096


def _truncate(text: str) -> str:
    if len(text) <= MAX_TELEGRAM_MESSAGE_LEN:
        return text
    return text[: MAX_TELEGRAM_MESSAGE_LEN - 3] + "..."


class TelegramReplyHandle:
    """已发送的 Telegram 消息，edit 时原地替换文本。"""

    def __init__(self, message: Message):
        self._message = message

    @property
    def message_id(self) -> int:
        return self._message.message_id

    async def edit(self, text: str) -> None:
        try:
            await self._message.edit_text(_truncate(text))
        except TelegramError as e:
            raise TransportError(code="TELEGRAM_EDIT_FAILED", message=str(e)) from e


class TelegramResponder:
    """以引用回复的形式回应一条入站消息。"""

    def __init__(self, message: Message):
        self._message = message

    async def reply(self, text: str) -> TelegramReplyHandle:
        try:
            sent = await self._message.reply_text(_truncate(text), do_quote=True)
        except TelegramError as e:
            raise TransportError(code="TELEGRAM_SEND_FAILED", message=str(e)) from e
        return TelegramReplyHandle(sent)


def is_reply_to_bot(message: Message, bot_id: Optional[int]) -> bool:
    replied = message.reply_to_message
    if replied is None or replied.from_user is None or bot_id is None:
        return False
    return replied.from_user.id == bot_id


def turn_from_message(message: Optional[Message]) -> Optional[InboundTurn]:
    if message is None or message.from_user is None:
        return None
    user = message.from_user
    return InboundTurn(user_id=user.id, display_name=user.first_name or "")


class TelegramRelayBot:
    """把 Telegram 更新路由到 ConversationOrchestrator。"""

    def __init__(
        self,
        orchestrator: ConversationOrchestrator,
        bot_id: Optional[int],
        wake_word: str = "akeno",
    ):
        self._orchestrator = orchestrator
        self._bot_id = bot_id
        self._wake_word = wake_word

    async def on_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        turn = turn_from_message(message)
        if turn is None:
            return
        command = parse_command(message.text or "", context.bot.username)
        if command is None:
            return
        logger.info(
            "Dispatching command",
            extra={"extra": {"user_id": turn.user_id, "command": type(command).__name__}},
        )
        await self._orchestrator.handle(turn, command, TelegramResponder(message))

    async def on_text(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.effective_message
        turn = turn_from_message(message)
        if turn is None:
            return
        command = select_chat_trigger(
            message.text or "",
            self._wake_word,
            is_reply_to_bot(message, self._bot_id),
        )
        if command is None:
            return
        await self._orchestrator.handle(turn, command, TelegramResponder(message))

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        error = context.error
        payload = {"error": str(error)}
        if isinstance(error, TransportError):
            payload["code"] = error.code
        logger.error(
            "Update handling failed",
            exc_info=(type(error), error, error.__traceback__) if error else None,
            extra={"extra": payload},
        )

    def build_application(self, token: str) -> Application:
        application = Application.builder().token(token).concurrent_updates(True).build()
        only_messages = filters.UpdateType.MESSAGE
        application.add_handler(MessageHandler(only_messages & filters.COMMAND, self.on_command))
        application.add_handler(MessageHandler(only_messages & filters.TEXT & ~filters.COMMAND, self.on_text))
        application.add_error_handler(self.on_error)
        return application


def main() -> None:
    try:
        cfg = require_runtime_settings(settings)
    except ConfigurationError as e:
        logger.error("Startup failed", extra={"extra": {"code": e.code, "error": e.message}})
        raise SystemExit(e.message)
    bot = TelegramRelayBot(get_default_orchestrator(), bot_id=cfg.bot_id, wake_word=cfg.wake_word)
    application = bot.build_application(cfg.bot_token)
    logger.info("Starting long polling", extra={"extra": {"bot_id": cfg.bot_id}})
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
