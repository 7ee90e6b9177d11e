"""Provider 抽象接口。

PromptRelayClient 不直接依赖具体厂商的 HTTP 细节，而是依赖此协议：

- 每个厂商实现一个 GenerationProvider（如 GeminiClient）。
- 负责：把组合好的 prompt 转成具体 API 请求，并把响应 JSON 解析为 GenerationResult。
- 传输层失败以 domain.exceptions 中的 BusinessError 子类抛出。
"""

from typing import Protocol

from relay_core.domain.models import GenerationResult


class GenerationProvider(Protocol):
    """文本生成 Provider 客户端协议。

    实现者需要提供：
    - name: Provider 名称，用于日志/统计。
    - generate(prompt): 执行一次非流式生成调用。
    - agenerate(prompt): 异步版本，只挂起调用方协程。
    """

    name: str

    def generate(self, prompt: str) -> GenerationResult:
        ...

    async def agenerate(self, prompt: str) -> GenerationResult:
        ...
