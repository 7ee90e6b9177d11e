"""Relay Core 顶层包。

该包提供捐赠者网站聊天助手的核心实现，
包括配置加载、领域模型、Provider 适配、Prompt 中继、
聊天会话状态机与内容工作室等能力。
"""

from relay_core.agents.chat_session import ConversationSession
from relay_core.agents.content_studio import ContentStudio
from relay_core.domain.models import Message, PromptRequest, PromptResult
from relay_core.relay.client import PromptRelayClient

__all__ = [
    "ContentStudio",
    "ConversationSession",
    "Message",
    "PromptRelayClient",
    "PromptRequest",
    "PromptResult",
]
