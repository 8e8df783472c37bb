"""配置层：AgentSettings（pydantic-settings）与 ConfigStore（YAML 持久化）。"""
