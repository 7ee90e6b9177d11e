"""文本生成 Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 维护 Provider 与模型配置 (registry)。
- 提供各厂商的具体实现 (gemini_client)。
"""

from typing import Optional

from relay_core.config.relay_config import RelayConfig
from relay_core.config.settings import settings
from relay_core.providers.base import GenerationProvider
from relay_core.providers.gemini_client import GeminiClient
from relay_core.providers.registry import get_provider_config, resolve_model


def create_provider(
    name: Optional[str] = None,
    config: Optional[RelayConfig] = None,
    model_name: Optional[str] = None,
) -> GenerationProvider:
    """根据名称创建 Provider 实例，默认取配置中的 provider。

    未显式传入 config 时，从 settings 构建一次 RelayConfig 并注入。
    未知的 provider/model 名称抛出 KeyError。
    """

    provider_cfg = get_provider_config(name or getattr(settings, "default_provider", "gemini"))
    if config is None:
        model_cfg = resolve_model(provider_cfg, model_name or getattr(settings, "default_model", "assistant-chat"))
        config = RelayConfig.from_settings(
            settings,
            model=model_cfg.provider_model,
            default_endpoint=provider_cfg.base_url,
        )
    return GeminiClient(config)


__all__ = ["GenerationProvider", "GeminiClient", "create_provider"]
