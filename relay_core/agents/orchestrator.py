"""对话编排核心模块。

把历史存储、补全网关与传输层回复串成一轮完整的处理：
摄入用户消息 -> 发出占位回复 -> 调用网关 -> 提交助手消息 -> 原地编辑占位回复。

摄入与提交是两次独立的加锁，网关调用期间不持有任何锁。
因此同一用户在两次加锁之间执行的 /prompt 或 /clear 不会被撤销，
助手回复会追加到提交时刻的会话上。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Literal, Optional, Protocol
from uuid import uuid4
import logging
import time

from relay_core.domain.commands import Chat, Clear, Command, Help, Prompt, Source, View, help_text
from relay_core.domain.conversation import HistoryStore
from relay_core.domain.exceptions import BusinessError, GatewayError, ValidationError
from relay_core.domain.models import Conversation, Role, make_message
from relay_core.infrastructure.logging.logger import logger
from relay_core.prompts import load_system_prompt, render_system_prompt
from relay_core.providers.base import CompletionGateway


EMPTY_HISTORY_TEXT = "Empty chat history."
PROMPT_SET_TEXT = "Prompt set."
HISTORY_CLEARED_TEXT = "Chat histories cleared."
SOURCE_UNAVAILABLE_TEXT = "No source link has been configured."


class ReplyHandle(Protocol):
    """已发出的回复，可在原处编辑。"""

    async def edit(self, text: str) -> None:
        ...


class Responder(Protocol):
    """传输层协议：回复当前入站消息。失败时抛出 TransportError。"""

    async def reply(self, text: str) -> ReplyHandle:
        ...


@dataclass(frozen=True)
class InboundTurn:
    """一条入站消息中编排层关心的部分。"""

    user_id: Hashable
    display_name: str = ""


@dataclass
class TurnResult:
    """一轮处理的结果。

    status:
        - "ignored": 空输入等，未做任何修改。
        - "replied": 已回复（补全成功或命令已执行）。
        - "failed": 网关或校验失败，未提交助手消息。
    """

    status: Literal["ignored", "replied", "failed"]
    reply_text: Optional[str] = None
    error: Optional[BusinessError] = None


@dataclass
class OrchestratorConfig:
    persona_prompt: str = field(default_factory=load_system_prompt)
    name_placeholder: str = "[name]"
    placeholder_text: str = "💭"
    failure_text: str = "Sorry, something went wrong. Please try again later."
    source_url: str = ""


class ConversationOrchestrator:
    def __init__(
        self,
        store: HistoryStore,
        gateway: CompletionGateway,
        config: Optional[OrchestratorConfig] = None,
    ):
        self._store = store
        self._gateway = gateway
        self._config = config or OrchestratorConfig()

    async def handle(self, turn: InboundTurn, command: Command, responder: Responder) -> TurnResult:
        """按命令变体分发到对应入口。"""
        if isinstance(command, Chat):
            return await self.complete_chat(turn, command.text, responder)
        if isinstance(command, Prompt):
            return await self.set_prompt(turn, command.text, responder)
        if isinstance(command, View):
            return await self.view_history(turn, responder)
        if isinstance(command, Clear):
            return await self.clear_history(turn, responder)
        if isinstance(command, Help):
            return await self.show_help(responder)
        if isinstance(command, Source):
            return await self.show_source(responder)
        raise TypeError(f"Unsupported command: {command!r}")

    async def complete_chat(self, turn: InboundTurn, content: str, responder: Responder) -> TurnResult:
        """执行一轮对话补全。

        Args:
            turn: 入站消息（用户 ID 与显示名）
            content: 用户输入，为空时直接忽略
            responder: 传输层回复接口

        Returns:
            TurnResult；网关失败以 status="failed" 返回，传输层错误直接抛出
        """
        if not content:
            return TurnResult(status="ignored")

        start_time = time.time()
        log_ctx: Dict[str, Any] = {"trace_id": f"tr-{uuid4().hex}", "user_id": turn.user_id}

        # 1. 摄入：一次加锁内完成 system 合成、追加 user 消息与快照
        try:
            user_msg = make_message(Role.USER, content)
            system_prompt = render_system_prompt(
                self._config.persona_prompt, turn.display_name, self._config.name_placeholder
            )
            history = self._store.append_turn(turn.user_id, system_prompt, user_msg)
        except ValidationError as e:
            self._log(logging.WARNING, "Rejected user message", log_ctx, code=e.code, error=e.message)
            return TurnResult(status="failed", error=e)
        self._log(logging.INFO, "Stored user message", log_ctx, message_count=len(history))

        # 2. 占位回复必须在网关调用之前可见
        handle = await responder.reply(self._config.placeholder_text)

        # 3. 调用网关（锁外）
        self._log(
            logging.INFO,
            "Calling gateway",
            log_ctx,
            gateway=getattr(self._gateway, "name", "unknown"),
            message_count=len(history),
        )
        try:
            result = await self._gateway.complete(history)
        except (GatewayError, ValidationError) as e:
            self._log(
                logging.ERROR,
                "Gateway call failed",
                log_ctx,
                code=e.code,
                error=e.message,
                http_status=e.http_status,
            )
            await handle.edit(self._config.failure_text)
            return TurnResult(status="failed", error=e)

        # 4. 提交：第二次独立加锁
        self._store.append(turn.user_id, Role.ASSISTANT, result.text)
        self._log(logging.INFO, "Stored assistant message", log_ctx)

        # 5. 原地编辑占位回复
        await handle.edit(result.text)
        self._log(
            logging.INFO,
            "Completed chat turn",
            log_ctx,
            elapsed_seconds=round(time.time() - start_time, 2),
        )
        return TurnResult(status="replied", reply_text=result.text)

    async def set_prompt(self, turn: InboundTurn, prompt: str, responder: Responder) -> TurnResult:
        system_prompt = render_system_prompt(prompt, turn.display_name, self._config.name_placeholder)
        self._store.reset_with_system(turn.user_id, system_prompt)
        self._log(logging.INFO, "System prompt reset", {"user_id": turn.user_id})
        return await self._reply(responder, PROMPT_SET_TEXT)

    async def view_history(self, turn: InboundTurn, responder: Responder) -> TurnResult:
        return await self._reply(responder, render_history(self._store.snapshot(turn.user_id)))

    async def clear_history(self, turn: InboundTurn, responder: Responder) -> TurnResult:
        self._store.clear(turn.user_id)
        self._log(logging.INFO, "History cleared", {"user_id": turn.user_id})
        return await self._reply(responder, HISTORY_CLEARED_TEXT)

    async def show_help(self, responder: Responder) -> TurnResult:
        return await self._reply(responder, help_text())

    async def show_source(self, responder: Responder) -> TurnResult:
        return await self._reply(responder, self._config.source_url or SOURCE_UNAVAILABLE_TEXT)

    @staticmethod
    async def _reply(responder: Responder, text: str) -> TurnResult:
        await responder.reply(text)
        return TurnResult(status="replied", reply_text=text)

    @staticmethod
    def _log(level: int, message: str, log_ctx: Dict[str, Any], **fields: Any) -> None:
        payload = dict(log_ctx)
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})


def render_history(history: Conversation) -> str:
    """把会话渲染为 "[Role]: content" 段落，按时间顺序以空行分隔。"""
    if not history:
        return EMPTY_HISTORY_TEXT
    return "\n\n".join(f"[{msg.role.label}]: {msg.content.strip()}" for msg in history)
