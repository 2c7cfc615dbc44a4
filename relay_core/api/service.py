"""对外服务装配模块。

提供默认的历史存储、补全网关与编排器实例，供传输层复用。
"""

from typing import Optional

from relay_core.agents.orchestrator import ConversationOrchestrator, OrchestratorConfig
from relay_core.config.settings import Settings, settings
from relay_core.domain.conversation import HistoryStore
from relay_core.infrastructure.storage.memory_store import InMemoryHistoryStore
from relay_core.prompts import load_system_prompt
from relay_core.providers import create_gateway


_store: Optional[HistoryStore] = None
_orchestrator: Optional[ConversationOrchestrator] = None


def build_orchestrator_config(cfg: Settings = settings) -> OrchestratorConfig:
    """把配置项映射为编排器配置；未设置 persona_prompt 时加载默认人设。"""
    return OrchestratorConfig(
        persona_prompt=cfg.persona_prompt or load_system_prompt(),
        name_placeholder=cfg.name_placeholder,
        placeholder_text=cfg.placeholder_text,
        failure_text=cfg.failure_text,
        source_url=cfg.source_url,
    )


def get_default_store() -> HistoryStore:
    """获取进程内共享的历史存储（单例）。"""
    global _store
    if _store is None:
        _store = InMemoryHistoryStore()
    return _store


def get_default_orchestrator() -> ConversationOrchestrator:
    """获取默认的对话编排器实例（单例）。"""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ConversationOrchestrator(
            store=get_default_store(),
            gateway=create_gateway(),
            config=build_orchestrator_config(),
        )
    return _orchestrator
