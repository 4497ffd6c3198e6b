from .config import PanelConfig, load_config
from .registry import RegistryConfig, RegistryManager
from .runtime import RuntimeClient
from .state import PanelState

__all__ = [
    "PanelConfig",
    "PanelState",
    "RegistryConfig",
    "RegistryManager",
    "RuntimeClient",
    "load_config",
]
