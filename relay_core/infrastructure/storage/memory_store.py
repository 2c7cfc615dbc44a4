import threading
from typing import Dict, List

from relay_core.domain.conversation import HistoryStore, UserId
from relay_core.domain.models import ChatMessage, Conversation, Role, make_message


class InMemoryHistoryStore(HistoryStore):
    """进程内的每用户对话历史。

    整张表由一把锁保护；临界区内只做 dict/list 操作，不做任何 I/O，
    调用方拿到的永远是 tuple 快照，不会持有内部列表的引用。
    消息在进入临界区之前完成构造与校验，校验失败不会留下半截修改。
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._histories: Dict[UserId, List[ChatMessage]] = {}

    def get_or_create(self, user: UserId) -> Conversation:
        with self._lock:
            return tuple(self._histories.setdefault(user, []))

    def append_system_if_empty(self, user: UserId, text: str) -> None:
        message = make_message(Role.SYSTEM, text)
        with self._lock:
            messages = self._histories.setdefault(user, [])
            if not messages:
                messages.append(message)

    def append(self, user: UserId, role: Role, text: str) -> None:
        message = make_message(role, text)
        with self._lock:
            self._histories.setdefault(user, []).append(message)

    def append_turn(self, user: UserId, system_text: str, message: ChatMessage) -> Conversation:
        """摄入阶段：空会话先插入 system 消息，再追加本轮消息，返回快照。"""

        system = make_message(Role.SYSTEM, system_text)
        with self._lock:
            messages = self._histories.setdefault(user, [])
            if not messages:
                messages.append(system)
            messages.append(message)
            return tuple(messages)

    def reset_with_system(self, user: UserId, text: str) -> None:
        message = make_message(Role.SYSTEM, text)
        with self._lock:
            self._histories[user] = [message]

    def clear(self, user: UserId) -> None:
        with self._lock:
            self._histories.setdefault(user, []).clear()

    def snapshot(self, user: UserId) -> Conversation:
        with self._lock:
            return tuple(self._histories.get(user, ()))

    def users(self) -> List[UserId]:
        with self._lock:
            return list(self._histories)

    def __len__(self) -> int:
        with self._lock:
            return len(self._histories)
