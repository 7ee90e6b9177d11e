"""统一的消息与结果数据模型。

本模块定义了 relay 各层之间共享的标准数据结构：

- Message: 聊天窗口中的一条消息（user/assistant）。
- PromptRequest: 一次中继请求的输入（系统上下文 + 用户问题）。
- PromptResult: 中继调用的结构化结果，Ok(text) 或 Err(kind)。
- GenerationResult: Provider 解析响应后的统一结果。

Provider 适配器（如 GeminiClient）只负责产出 GenerationResult，
由 PromptRelayClient 把它归一化为 PromptResult。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional


# 聊天消息的发送方
Sender = Literal["user", "assistant"]

# 结构化失败类型：
# - transport_failure: 网络错误、非 2xx、响应不是 JSON
# - empty_generation: 调用成功但没有可用的候选文本
# - invalid_input: 本地校验不通过，未发起网络调用
ErrorKind = Literal["transport_failure", "empty_generation", "invalid_input"]

PROMPT_TEMPLATE = "{system_context}\n\nUser Query: {user_query}"


@dataclass(frozen=True)
class Message:
    """一条不可变的聊天消息。

    - role: 发送方，user 或 assistant。
    - text: 消息文本，原样保存。
    - seq: 会话内单调递增的序号，可作为渲染时的稳定 key。
    """

    role: Sender
    text: str
    seq: int = 0


@dataclass(frozen=True)
class PromptRequest:
    """一次中继请求。

    user_query 允许为空字符串；是否拒绝空输入由调用方（会话层）决定。
    """

    user_query: str
    system_context: str = ""

    def combined(self) -> str:
        """按固定模板拼接出最终发送给模型的 prompt。"""

        return PROMPT_TEMPLATE.format(system_context=self.system_context, user_query=self.user_query)


@dataclass(frozen=True)
class PromptResult:
    """中继调用的结构化结果。

    ok 为 True 时 text 一定是非空字符串；否则 error 标明失败类型，
    detail 保存诊断信息（不直接展示给终端用户）。
    """

    text: Optional[str] = None
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, text: str) -> "PromptResult":
        return cls(text=text)

    @classmethod
    def failure(cls, kind: ErrorKind, detail: Optional[str] = None) -> "PromptResult":
        return cls(error=kind, detail=detail)


@dataclass
class GenerationUsage:
    """Provider 返回的 token 统计信息（统一格式）。"""

    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class GenerationResult:
    """一次生成调用解析后的结果。

    - provider / model: 逻辑 Provider 名与实际模型 ID。
    - text: 第一个候选的第一段文本；没有可用文本时为 None。
    - finish_reason: 候选的结束原因（如 STOP、SAFETY）。
    - block_reason: prompt 被拦截时的原因。
    - usage: 可选的 token 使用统计。
    - raw: 原始响应 JSON，用于调试或日志记录。
    """

    provider: str
    model: str
    text: Optional[str]
    finish_reason: Optional[str] = None
    block_reason: Optional[str] = None
    usage: Optional[GenerationUsage] = None
    raw: Dict[str, Any] = field(default_factory=dict)
