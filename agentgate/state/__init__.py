from agentgate.state.base import AppConfig, ConfigStore
from agentgate.state.memory import MemoryConfigStore, parse_bootstrap

__all__ = ["AppConfig", "ConfigStore", "MemoryConfigStore", "parse_bootstrap"]
