"""统一的对话数据模型。

本模块定义了编排层、历史存储与补全网关之间共享的标准数据结构：

- Role: 消息角色（system/user/assistant）。
- ChatMessage: 一条对话消息，不可变，可安全地跨锁传递。
- CompletionResult: 补全网关成功返回后的统一结果。

网关适配器（如 ModelsApiClient）只依赖这些模型，
并负责在远端 JSON 与这些模型之间做转换。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from relay_core.domain.exceptions import ValidationError


class Role(str, Enum):
    """消息角色。value 为线上小写值，str() 为展示用的首字母大写形式。"""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    def __str__(self) -> str:
        return self.label


@dataclass(frozen=True)
class ChatMessage:
    """一条对话消息。

    - role: 消息角色。
    - content: 纯文本内容。
    - name: 可选的发言者名称，为空时不会出现在请求体里。
    """

    role: Role
    content: str
    name: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            payload["name"] = self.name
        return payload


# 一个用户会话的只读快照，按追加顺序排列
Conversation = Tuple[ChatMessage, ...]


def make_message(role: Union[Role, str], content: str, name: Optional[str] = None) -> ChatMessage:
    """构造并校验一条消息，非法输入抛出 ValidationError。"""

    try:
        role = Role(role)
    except ValueError:
        raise ValidationError(code="INVALID_ROLE", message=f"Unknown role: {role!r}")
    if not isinstance(content, str):
        raise ValidationError(code="INVALID_CONTENT", message="Message content must be a string")
    if role is Role.USER and not content:
        raise ValidationError(code="EMPTY_USER_CONTENT", message="User message content is empty")
    return ChatMessage(role=role, content=content, name=name)


@dataclass
class CompletionResult:
    """一次补全调用的最终结果。

    - text: 用于回复的文本（已应用空内容兜底）。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    text: str
    raw: Dict[str, Any] = field(default_factory=dict)
