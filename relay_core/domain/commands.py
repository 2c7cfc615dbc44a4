"""入站命令的类型化表示与解析。

传输层只负责把 Telegram 文本解码为这里的 Command 变体，
编排层按变体类型分发，不再关心原始文本格式。
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class Prompt:
    text: str


@dataclass(frozen=True)
class Chat:
    text: str


@dataclass(frozen=True)
class View:
    pass


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Source:
    pass


Command = Union[Help, Prompt, Chat, View, Clear, Source]


# 命令关键字 -> (变体, 帮助说明)；askgpt/reset 为别名
COMMANDS: Dict[str, Tuple[type, str]] = {
    "help": (Help, "See all available commands"),
    "prompt": (Prompt, "set system prompt."),
    "chat": (Chat, "chat with ai."),
    "askgpt": (Chat, "chat with ai."),
    "view": (View, "view chat histories."),
    "clear": (Clear, "clear history chats."),
    "reset": (Clear, "clear history chats."),
    "source": (Source, "source."),
}


def help_text() -> str:
    lines = ["These commands are supported:", ""]
    lines.extend(f"/{keyword} - {description}" for keyword, (_, description) in COMMANDS.items())
    return "\n".join(lines)


def parse_command(text: str, bot_username: Optional[str] = None) -> Optional[Command]:
    """把 "/cmd[@bot] args" 解析为 Command。

    关键字不区分大小写；未知命令或 @ 了其他机器人的命令返回 None。
    """

    if not text or not text.startswith("/"):
        return None
    parts = text[1:].split(maxsplit=1)
    if not parts:
        return None
    rest = parts[1] if len(parts) > 1 else ""
    keyword, _, mention = parts[0].partition("@")
    if mention and (not bot_username or mention.lower() != bot_username.lower()):
        return None
    entry = COMMANDS.get(keyword.lower())
    if entry is None:
        return None
    variant = entry[0]
    if variant in (Prompt, Chat):
        return variant(rest.strip())
    return variant()


def select_chat_trigger(text: str, wake_word: str, replied_to_bot: bool) -> Optional[Chat]:
    """为非命令文本选择唯一的补全触发器。

    以唤醒词开头（不区分大小写）或回复了机器人自己的消息时返回 Chat，
    否则返回 None，消息被忽略。两种条件同时满足也只触发一次。
    """

    if not text:
        return None
    if wake_word and text.lower().startswith(wake_word.lower()):
        return Chat(text)
    if replied_to_bot:
        return Chat(text)
    return None
