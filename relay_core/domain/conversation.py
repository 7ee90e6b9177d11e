"""单个聊天窗口的会话消息序列。

会话只存在于内存中，由一个 ConversationSession 独占，不跨会话共享，
也不做持久化：窗口关闭或页面刷新后即丢失。
"""

from typing import Iterator, List, Optional, Tuple

from .models import Message, Sender


class Conversation:
    """按插入顺序保存 Message，插入顺序是唯一的排序保证。"""

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._next_seq = 0

    def append(self, role: Sender, text: str) -> Message:
        msg = Message(role=role, text=text, seq=self._next_seq)
        self._next_seq += 1
        self._messages.append(msg)
        return msg

    @property
    def messages(self) -> Tuple[Message, ...]:
        """返回当前消息的快照，调用方无法借此修改会话。"""

        return tuple(self._messages)

    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))
