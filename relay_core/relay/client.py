"""Prompt 中继客户端。

两层 API：

- generate_result / agenerate_result: 返回结构化的 PromptResult，
  调用方可以区分“传输失败”和“模型没有给出内容”。
- generate / agenerate: 聊天窗口使用的便捷包装，把所有 Err 映射为固定的兜底文案，
  永远返回可展示的非空字符串，从不抛出异常。

客户端本身无可变状态，可被多个会话并发复用。
"""

from typing import Dict, Optional

from relay_core.domain.exceptions import BusinessError
from relay_core.domain.models import ErrorKind, GenerationResult, PromptRequest, PromptResult
from relay_core.infrastructure.logging.logger import logger
from relay_core.providers.base import GenerationProvider


HIGH_TRAFFIC_TEXT = "Our AI service is currently experiencing high traffic. Please try again later."
EMPTY_GENERATION_TEXT = "I couldn't generate a response."

FALLBACK_TEXT: Dict[ErrorKind, str] = {
    "transport_failure": HIGH_TRAFFIC_TEXT,
    "empty_generation": EMPTY_GENERATION_TEXT,
}


def build_prompt(user_query: str, system_context: str = "") -> str:
    """按固定模板组合系统上下文与用户问题。"""

    return PromptRequest(user_query=user_query, system_context=system_context).combined()


def fallback_text(result: PromptResult) -> str:
    """把 PromptResult 映射为可展示的文本。"""

    if result.ok and result.text:
        return result.text
    # invalid_input 只由本地校验产生（如内容工作室），按空生成处理
    return FALLBACK_TEXT.get(result.error, EMPTY_GENERATION_TEXT)


class PromptRelayClient:
    """把用户问题中继到文本生成接口，并归一化结果。"""

    def __init__(self, provider: GenerationProvider):
        self._provider = provider

    @property
    def provider_name(self) -> str:
        return getattr(self._provider, "name", "unknown")

    # ---- 结构化 API ----

    def generate_result(self, user_query: str, system_context: str = "") -> PromptResult:
        prompt = build_prompt(user_query, system_context)
        try:
            generation = self._provider.generate(prompt)
        except BusinessError as e:
            return self._transport_failure(e)
        except Exception as e:  # noqa: BLE001 - 任何失败都不能越过中继边界
            return self._unexpected_failure(e)
        return self._to_result(generation)

    async def agenerate_result(self, user_query: str, system_context: str = "") -> PromptResult:
        prompt = build_prompt(user_query, system_context)
        try:
            generation = await self._provider.agenerate(prompt)
        except BusinessError as e:
            return self._transport_failure(e)
        except Exception as e:  # noqa: BLE001 - 任何失败都不能越过中继边界
            return self._unexpected_failure(e)
        return self._to_result(generation)

    # ---- 文本 API ----

    def generate(self, user_query: str, system_context: str = "") -> str:
        return fallback_text(self.generate_result(user_query, system_context))

    async def agenerate(self, user_query: str, system_context: str = "") -> str:
        return fallback_text(await self.agenerate_result(user_query, system_context))

    # ---- 辅助方法 ----

    def _to_result(self, generation: Optional[GenerationResult]) -> PromptResult:
        text = getattr(generation, "text", None)
        if isinstance(text, str) and text:
            return PromptResult.success(text)
        # 没有候选文本是正常现象（如内容被拦截），只记 INFO
        logger.info("Empty generation", extra={"extra": {
            "provider": self.provider_name,
            "finish_reason": getattr(generation, "finish_reason", None),
            "block_reason": getattr(generation, "block_reason", None),
        }})
        return PromptResult.failure("empty_generation", "no usable candidate text")

    def _transport_failure(self, e: BusinessError) -> PromptResult:
        logger.error(f"Relay call failed: {e.message}", extra={"extra": {
            "provider": self.provider_name,
            "code": e.code,
            "http_status": e.http_status,
            "error_type": type(e).__name__,
        }})
        return PromptResult.failure("transport_failure", f"{e.code}: {e.message}")

    def _unexpected_failure(self, e: Exception) -> PromptResult:
        logger.exception("Relay call failed unexpectedly", extra={"extra": {
            "provider": self.provider_name,
            "error_type": type(e).__name__,
        }})
        return PromptResult.failure("transport_failure", f"UNEXPECTED_ERROR: {e}")
