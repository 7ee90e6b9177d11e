"""聊天窗口的会话状态机。

一个 ConversationSession 对应一个聊天窗口实例：

1. initialize(greeting) 写入一条 assistant 欢迎语。
2. submit(query) 先同步追加 user 消息，再进入 pending 状态调用中继，
   最后追加恰好一条 assistant 消息（正常回复或兜底文案）。

默认情况下模型看不到历史：每次只发送最新问题 + 固定系统上下文。
开启 include_transcript 后，最近的若干条消息会附加到系统上下文中。
"""

from typing import Optional, Protocol, Tuple

from relay_core.domain.conversation import Conversation
from relay_core.domain.exceptions import ValidationError
from relay_core.domain.models import Message
from relay_core.infrastructure.logging.logger import logger
from relay_core.relay.client import HIGH_TRAFFIC_TEXT


ROLE_LABELS = {"user": "User", "assistant": "Assistant"}


class TextRelay(Protocol):
    """会话只依赖中继的文本 API。"""

    def generate(self, user_query: str, system_context: str = "") -> str:
        ...

    async def agenerate(self, user_query: str, system_context: str = "") -> str:
        ...


class ConversationSession:
    """单个聊天窗口的有序消息与 pending 状态。

    同一会话同一时间只允许一个进行中的调用；pending 期间再次 submit
    会抛出 ValidationError(code="SESSION_BUSY")，调用方应在 pending 时禁用输入。
    """

    def __init__(
        self,
        relay: TextRelay,
        system_context: str = "",
        *,
        include_transcript: bool = False,
        max_context_messages: int = 20,
    ):
        """初始化会话。

        Args:
            relay: 中继客户端（PromptRelayClient 或兼容对象）
            system_context: 每次调用都附带的固定系统上下文
            include_transcript: 是否把历史消息附加到系统上下文
            max_context_messages: 附加历史时最多携带的消息数
        """
        if max_context_messages < 1:
            raise ValidationError(code="INVALID_CONTEXT_LIMIT", message="max_context_messages must be >= 1")
        self._relay = relay
        self._system_context = system_context
        self._include_transcript = include_transcript
        self._max_context_messages = max_context_messages
        self._conversation = Conversation()
        self._pending = False
        self._closed = False

    @property
    def messages(self) -> Tuple[Message, ...]:
        return self._conversation.messages

    @property
    def pending(self) -> bool:
        return self._pending

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def system_context(self) -> str:
        return self._system_context

    def initialize(self, greeting: str) -> Message:
        """在任何用户输入之前写入欢迎语。"""

        self._ensure_open()
        if len(self._conversation):
            raise ValidationError(code="SESSION_ALREADY_INITIALIZED", message="Conversation already has messages")
        return self._conversation.append("assistant", greeting)

    def submit(self, user_query: str) -> Optional[Message]:
        """提交一条用户消息并阻塞到回复返回。

        Returns:
            追加的 assistant 消息；空输入或会话已在等待期间关闭时返回 None。
        """
        context = self._begin(user_query)
        if context is None:
            return None
        try:
            reply = self._relay.generate(user_query, context)
        except BaseException:
            self._abort()
            raise
        finally:
            self._pending = False
        return self._deliver(reply)

    async def asubmit(self, user_query: str) -> Optional[Message]:
        """submit 的异步版本，等待期间只挂起当前协程。"""

        context = self._begin(user_query)
        if context is None:
            return None
        try:
            reply = await self._relay.agenerate(user_query, context)
        except BaseException:
            # 取消或中继异常时也要给出一条 assistant 消息
            self._abort()
            raise
        finally:
            self._pending = False
        return self._deliver(reply)

    def close(self) -> None:
        """关闭会话；此后返回的结果直接丢弃。"""

        self._closed = True

    # ---- 辅助方法 ----

    def _begin(self, user_query: str) -> Optional[str]:
        if not user_query.strip():
            return None
        self._ensure_open()
        if self._pending:
            raise ValidationError(code="SESSION_BUSY", message="A reply is still pending for this session")
        # 历史只包含本次提问之前的消息
        context = self._context_for_call()
        self._conversation.append("user", user_query)
        self._pending = True
        return context

    def _deliver(self, reply: str) -> Optional[Message]:
        if self._closed:
            logger.info("Discarded reply for closed session", extra={"extra": {
                "messages": len(self._conversation),
            }})
            return None
        return self._conversation.append("assistant", reply)

    def _abort(self) -> None:
        if not self._closed:
            self._conversation.append("assistant", HIGH_TRAFFIC_TEXT)

    def _context_for_call(self) -> str:
        if not self._include_transcript or not len(self._conversation):
            return self._system_context
        history = self._conversation.messages[-self._max_context_messages:]
        lines = [f"{ROLE_LABELS[m.role]}: {m.text}" for m in history]
        return f"{self._system_context}\n\nConversation so far:\n" + "\n".join(lines)

    def _ensure_open(self) -> None:
        if self._closed:
            raise ValidationError(code="SESSION_CLOSED", message="Session has been closed")
