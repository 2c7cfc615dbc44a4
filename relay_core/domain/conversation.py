from typing import Hashable, Protocol

from .models import ChatMessage, Conversation, Role


UserId = Hashable


class HistoryStore(Protocol):
    def get_or_create(self, user: UserId) -> Conversation:
        ...

    def append_system_if_empty(self, user: UserId, text: str) -> None:
        ...

    def append(self, user: UserId, role: Role, text: str) -> None:
        ...

    def append_turn(self, user: UserId, system_text: str, message: ChatMessage) -> Conversation:
        ...

    def reset_with_system(self, user: UserId, text: str) -> None:
        ...

    def clear(self, user: UserId) -> None:
        ...

    def snapshot(self, user: UserId) -> Conversation:
        ...
