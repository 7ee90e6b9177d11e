"""Gemini Provider 适配器。

本模块负责：

1. 接收已经按模板组合好的 prompt 文本。
2. 将其转换为 Generative Language API 的 generateContent 请求：
   - URL: {endpoint}/models/{model}:generateContent?key=<api_key>
   - Body: {"contents": [{"parts": [{"text": prompt}]}]}
3. 调用 HTTP 接口并把网络/API 异常转换为 domain.exceptions。
4. 将响应 JSON 解析为统一的 GenerationResult。

每次调用只尝试一次，不做重试；超时由 RelayConfig 显式给出。
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from relay_core.config.relay_config import RelayConfig
from relay_core.domain.exceptions import (
    ApiError,
    NetworkError,
    RateLimitError,
    ResponseFormatError,
    ValidationError,
)
from relay_core.domain.models import GenerationResult, GenerationUsage


class GeminiClient:
    """Gemini 提供方客户端实现。

    - name: Provider 名称（供日志/调试使用）。
    - generate / agenerate: 对外统一调用入口，返回 GenerationResult。
    """

    name = "gemini"

    def __init__(self, config: RelayConfig):
        # 配置在启动时构建并注入，调用路径中不读取全局 settings
        self._config = config

    @property
    def model(self) -> str:
        return self._config.model

    # ---- 同步 ----

    def generate(self, prompt: str) -> GenerationResult:
        self._ensure_api_key()
        try:
            with httpx.Client(timeout=self._config.timeout, trust_env=False) as client:
                resp = client.post(
                    self._config.generate_url,
                    params={"key": self._config.api_key},
                    json=self._build_payload(prompt),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接失败、超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        return self._handle_response(resp)

    # ---- 异步 ----

    async def agenerate(self, prompt: str) -> GenerationResult:
        self._ensure_api_key()
        try:
            async with httpx.AsyncClient(timeout=self._config.timeout, trust_env=False) as client:
                resp = await client.post(
                    self._config.generate_url,
                    params={"key": self._config.api_key},
                    json=self._build_payload(prompt),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e) or type(e).__name__, provider=self.name)
        return self._handle_response(resp)

    # ---- 辅助方法 ----

    def _ensure_api_key(self) -> None:
        if not self._config.api_key:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_API_KEY", message="GEMINI_API_KEY not set", provider=self.name)

    @staticmethod
    def _build_payload(prompt: str) -> Dict[str, Any]:
        return {"contents": [{"parts": [{"text": prompt}]}]}

    def _handle_response(self, resp) -> GenerationResult:
        status = resp.status_code
        if status == 429:
            # 限流不在这里重试，交给调用方
            raise RateLimitError(code="RATE_LIMIT", message="Gemini rate limit", http_status=429, provider=self.name)
        if not 200 <= status < 300:
            raise ApiError(code="API_ERROR", message=resp.text, http_status=status, provider=self.name)
        try:
            data = resp.json()
        except ValueError as e:
            raise ResponseFormatError(
                code="INVALID_JSON",
                message=f"Response is not valid JSON: {e}",
                http_status=status,
                provider=self.name,
            )
        return self._parse_response(data)

    def _parse_response(self, data: Any) -> GenerationResult:
        """解析 generateContent 响应。

        形状不符合预期（空候选列表、被拦截、字段缺失或类型不对）时
        返回 text=None，而不是抛出异常。
        """

        if not isinstance(data, dict):
            return GenerationResult(provider=self.name, model=self.model, text=None)

        block_reason = _as_dict(data.get("promptFeedback")).get("blockReason")
        candidates = data.get("candidates")
        text: Optional[str] = None
        finish_reason: Optional[str] = None
        if isinstance(candidates, list) and candidates:
            first = _as_dict(candidates[0])
            finish_reason = first.get("finishReason")
            text = self._first_text(first)

        return GenerationResult(
            provider=self.name,
            model=self.model,
            text=text,
            finish_reason=finish_reason,
            block_reason=block_reason,
            usage=self._parse_usage(data.get("usageMetadata")),
            raw=data,
        )

    @staticmethod
    def _first_text(candidate: Dict[str, Any]) -> Optional[str]:
        parts = _as_dict(candidate.get("content")).get("parts")
        if not isinstance(parts, list) or not parts:
            return None
        text = _as_dict(parts[0]).get("text")
        if isinstance(text, str) and text:
            return text
        return None

    @staticmethod
    def _parse_usage(raw: Any) -> Optional[GenerationUsage]:
        usage_raw = _as_dict(raw)
        if not usage_raw:
            return None
        return GenerationUsage(
            prompt_tokens=int(usage_raw.get("promptTokenCount", 0) or 0),
            completion_tokens=int(usage_raw.get("candidatesTokenCount", 0) or 0),
            total_tokens=int(usage_raw.get("totalTokenCount", 0) or 0),
        )


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}
