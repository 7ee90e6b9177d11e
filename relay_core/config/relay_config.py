"""Relay-scoped configuration passed explicitly to providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


MIN_TIMEOUT_SECONDS = 1.0


@dataclass(frozen=True)
class RelayConfig:
    """Connection settings for a single text-generation endpoint.

    Attributes:
        endpoint: API 基础 URL，例如 https://generativelanguage.googleapis.com/v1beta。
        api_key: 部署环境注入的密钥，不能写死在分发代码中。
        timeout: 单次请求的超时时间（秒），至少 1 秒。
        model: 厂商实际的模型 ID。
    """

    endpoint: str
    api_key: Optional[str]
    timeout: float
    model: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "endpoint", self.endpoint.rstrip("/"))
        if self.timeout < MIN_TIMEOUT_SECONDS:
            object.__setattr__(self, "timeout", MIN_TIMEOUT_SECONDS)

    @classmethod
    def from_settings(cls, cfg, model: str, default_endpoint: str = "") -> "RelayConfig":
        """在进程启动时从 Settings 构建一次，之后显式注入，调用路径中不再读取全局配置。"""

        return cls(
            endpoint=getattr(cfg, "gemini_base_url", None) or default_endpoint,
            api_key=getattr(cfg, "gemini_api_key", None),
            timeout=float(getattr(cfg, "http_timeout", 30.0)),
            model=model,
        )

    @property
    def generate_url(self) -> str:
        return f"{self.endpoint}/models/{self.model}:generateContent"
