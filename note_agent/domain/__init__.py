"""领域层模型与协议。

包含：
- models: Message / ProviderRequest / ProviderResponse 以及重试判定结果。
- conversation: 内存对话历史 ConversationHistory 与外部 Storage 协议。
- exceptions: 业务异常类型定义。
"""
