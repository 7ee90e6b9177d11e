"""Prompt 中继层：所有调用方（聊天窗口、内容工作室）共享的唯一入口。"""

from relay_core.relay.client import (
    EMPTY_GENERATION_TEXT,
    HIGH_TRAFFIC_TEXT,
    PromptRelayClient,
    build_prompt,
    fallback_text,
)

__all__ = [
    "EMPTY_GENERATION_TEXT",
    "HIGH_TRAFFIC_TEXT",
    "PromptRelayClient",
    "build_prompt",
    "fallback_text",
]
