"""管理后台内容工作室的文案生成。

与聊天窗口不同，这里生成的内容可能会被直接发布，
因此使用结构化的 PromptResult，调用方可以区分传输失败和空生成。
"""

from typing import Optional, Protocol, Tuple

from relay_core.domain.exceptions import ValidationError
from relay_core.domain.models import PromptResult


TONES: Tuple[str, ...] = ("Professional", "Urgent & Emotional", "Gratitude", "Social Media Post")
DEFAULT_TONE = "Professional"
CONTENT_TEMPLATE = "Write a {tone} piece about: {topic}. Format nicely with headers if needed."


class ResultRelay(Protocol):
    def generate_result(self, user_query: str, system_context: str = "") -> PromptResult:
        ...

    async def agenerate_result(self, user_query: str, system_context: str = "") -> PromptResult:
        ...


class ContentStudio:
    """按主题和语气生成募捐文案。"""

    def __init__(self, relay: ResultRelay, system_context: str = ""):
        self._relay = relay
        self._system_context = system_context

    @staticmethod
    def build_prompt(topic: str, tone: str = DEFAULT_TONE) -> str:
        if tone not in TONES:
            raise ValidationError(code="UNKNOWN_TONE", message=f"Unknown tone: {tone!r}", tones=list(TONES))
        return CONTENT_TEMPLATE.format(tone=tone, topic=topic)

    def generate(self, topic: str, tone: str = DEFAULT_TONE) -> PromptResult:
        prompt = self._prepare(topic, tone)
        if prompt is None:
            return PromptResult.failure("invalid_input", "topic is empty")
        return self._relay.generate_result(prompt, self._system_context)

    async def agenerate(self, topic: str, tone: str = DEFAULT_TONE) -> PromptResult:
        prompt = self._prepare(topic, tone)
        if prompt is None:
            return PromptResult.failure("invalid_input", "topic is empty")
        return await self._relay.agenerate_result(prompt, self._system_context)

    def _prepare(self, topic: str, tone: str) -> Optional[str]:
        # 语气先校验，空主题在本地拒绝，不发起网络调用
        prompt = self.build_prompt(topic, tone)
        if not topic.strip():
            return None
        return prompt
