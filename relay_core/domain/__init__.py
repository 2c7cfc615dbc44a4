"""领域层模型与协议。

包含：
- models: 统一的 Role / ChatMessage / CompletionResult 模型。
- commands: 入站命令的类型化变体与解析。
- conversation: 每用户历史存储的 HistoryStore 抽象。
- exceptions: 业务异常类型定义。
"""
