"""
Shared panel state: the registry manager and the runtime client.
"""

from __future__ import annotations

__all__ = ["PanelState"]

from typing import Any

from ghostpanel.core import get_logger, run_sync
from ghostpanel.core.exceptions import AuthError, NetworkError
from ghostpanel.registry import RegistryManager
from ghostpanel.runtime import RuntimeClient

from .config import PanelConfig

logger = get_logger(__name__)


class PanelState:
    """Clients shared by every request handler.

    Both members are safe to use from several threads or tasks at once.
    """

    config: PanelConfig
    registries: RegistryManager
    runtime: RuntimeClient

    def __init__(
        self,
        config: PanelConfig,
        registries: RegistryManager,
        runtime: RuntimeClient,
    ):
        self.config = config
        self.registries = registries
        self.runtime = runtime

    @staticmethod
    def create(config: PanelConfig | None = None) -> PanelState:
        """Build the panel state from configuration.

        Configured registries that cannot be reached or authenticated
        are logged and left out.

        Args:
            config: Panel configuration. Defaults if None.

        Returns:
            Panel state.
        """
        return run_sync(PanelState.acreate, config)

    @staticmethod
    async def acreate(config: PanelConfig | None = None) -> PanelState:
        config = config or PanelConfig()
        runtime = RuntimeClient(__provider__=_runtime_provider(config))
        registries = RegistryManager(
            max_concurrency=config.search_concurrency
        )
        for registry in config.registries:
            try:
                await registries.aadd_registry(registry)
            except (AuthError, NetworkError) as e:
                logger.warning(
                    "Registry %s not registered: %s", registry.name, e
                )
        logger.info(
            "Panel state ready with %s registries and %s runtime",
            len(registries),
            config.runtime_provider,
        )
        return PanelState(config, registries, runtime)


def _runtime_provider(config: PanelConfig) -> dict[str, Any]:
    parameters: dict[str, Any] = dict()
    if config.runtime_provider in ("bolt", "default"):
        parameters["endpoint"] = config.runtime_url
        parameters["timeout"] = config.runtime_timeout
    parameters.update(config.runtime_parameters)
    return {"type": config.runtime_provider, "parameters": parameters}
