"""领域层模型与协议。

包含：
- models: Message / PromptRequest / PromptResult / GenerationResult 等统一数据结构。
- conversation: 单个聊天会话内的有序消息序列。
- exceptions: 业务异常类型定义。
"""
