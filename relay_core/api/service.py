"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。Provider 配置在第一次使用时
从 settings 构建一次并注入，之后的调用路径不再读取全局配置。
"""

from typing import Any, Dict, Optional

from relay_core.agents.chat_session import ConversationSession
from relay_core.agents.content_studio import DEFAULT_TONE, ContentStudio
from relay_core.config.settings import settings
from relay_core.domain.models import PromptResult
from relay_core.prompts import load_system_context
from relay_core.providers import create_provider
from relay_core.relay.client import PromptRelayClient


_relay: Optional[PromptRelayClient] = None
_studio: Optional[ContentStudio] = None


def get_default_relay() -> PromptRelayClient:
    """获取默认的中继客户端实例（单例）。"""
    global _relay
    if _relay is None:
        _relay = PromptRelayClient(create_provider())
    return _relay


def get_default_studio() -> ContentStudio:
    """获取默认的内容工作室实例（单例）。"""
    global _studio
    if _studio is None:
        _studio = ContentStudio(
            get_default_relay(),
            system_context=load_system_context("content_writer", settings.prompt_locale),
        )
    return _studio


def reset_defaults() -> None:
    """清空单例，用于测试或重新加载配置。"""
    global _relay, _studio
    _relay = None
    _studio = None


def open_chat_session(relay: Optional[PromptRelayClient] = None) -> ConversationSession:
    """为一个聊天窗口创建已写入欢迎语的会话。

    Args:
        relay: 中继客户端（可选，不提供则使用默认单例）

    Returns:
        已初始化的 ConversationSession
    """
    locale = settings.prompt_locale
    session = ConversationSession(
        relay or get_default_relay(),
        system_context=load_system_context("donor_assistant", locale),
        include_transcript=settings.include_transcript,
        max_context_messages=settings.max_context_messages,
    )
    session.initialize(load_system_context("donor_assistant_greeting", locale))
    return session


def generate_content(topic: str, tone: str = DEFAULT_TONE) -> Dict[str, Any]:
    """生成一段文案，返回便于序列化的结果字典。

    Returns:
        包含 ok、text、error、detail 的字典
    """
    result: PromptResult = get_default_studio().generate(topic, tone)
    return {
        "ok": result.ok,
        "text": result.text,
        "error": result.error,
        "detail": result.detail,
    }


def session_transcript(session: ConversationSession) -> list[Dict[str, Any]]:
    """导出会话消息，供 UI 渲染。"""
    return [
        {"seq": m.seq, "role": m.role, "text": m.text}
        for m in session.messages
    ]
