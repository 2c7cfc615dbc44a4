"""Relay Core 顶层包。

该包提供 Telegram 对话中继机器人的核心实现，
包括配置加载、领域模型、每用户历史存储、补全网关适配、
对话编排以及 Telegram 传输层适配等能力。
"""

from relay_core.domain.models import ChatMessage, Role, make_message

__all__ = ["ChatMessage", "Role", "make_message"]
