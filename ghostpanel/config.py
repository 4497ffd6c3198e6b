"""
Panel configuration.

Values come from an optional YAML file, then from `GHOSTPANEL_*`
environment variables (a `.env` file is read first, the process
environment wins).
"""

from __future__ import annotations

__all__ = ["PanelConfig", "load_config"]

import os
from typing import Any, Literal

from dotenv import dotenv_values

from ghostpanel.core import DataModel, YamlLoader
from ghostpanel.core.exceptions import ConfigError
from ghostpanel.registry import RegistryConfig

ENV_PREFIX = "GHOSTPANEL_"


def default_registries() -> list[RegistryConfig]:
    return [
        RegistryConfig(
            name="local-drift",
            url="http://localhost:5000",
            insecure=True,
        ),
        RegistryConfig(
            name="docker-hub",
            url="https://registry-1.docker.io",
        ),
    ]


class PanelConfig(DataModel):
    """Panel configuration.

    Attributes:
        web_port: Port of the web interface.
        agent_port: Port agents connect to.
        cli_port: Port of the CLI endpoint.
        enable_quic: Serve the QUIC transport.
        enable_http3: Serve HTTP/3.
        tls_cert_path: TLS certificate file.
        tls_key_path: TLS private key file.
        runtime_url: Base URL of the runtime API.
        runtime_provider: Runtime backend, "bolt" or "memory".
        runtime_timeout: Runtime HTTP timeout in seconds.
        runtime_parameters: Extra parameters for the runtime provider.
        registries: Registries to register at startup.
        search_concurrency: Maximum registry requests in flight during a
            federated search.
        log_level: Level the host passes to `configure_logging`.
    """

    web_port: int = 9443
    agent_port: int = 8000
    cli_port: int = 9000
    enable_quic: bool = True
    enable_http3: bool = True
    tls_cert_path: str | None = None
    tls_key_path: str | None = None
    runtime_url: str = "http://localhost:8080"
    runtime_provider: Literal["bolt", "memory", "default"] = "bolt"
    runtime_timeout: float = 30
    runtime_parameters: dict[str, Any] = {}
    registries: list[RegistryConfig] = default_registries()
    search_concurrency: int = 8
    log_level: str = "INFO"


_ENV_FIELDS = (
    "web_port",
    "agent_port",
    "cli_port",
    "enable_quic",
    "enable_http3",
    "tls_cert_path",
    "tls_key_path",
    "runtime_url",
    "runtime_provider",
    "runtime_timeout",
    "search_concurrency",
    "log_level",
)


def load_config(
    path: str | None = None,
    env_file: str | None = ".env",
    environ: dict[str, str] | None = None,
) -> PanelConfig:
    """Load the panel configuration.

    Args:
        path: YAML file. Defaults only if None.
        env_file: dotenv file to read overrides from, if it exists.
        environ: Environment to read overrides from. Defaults to
            `os.environ`.

    Returns:
        Configuration.
    """
    data: dict[str, Any] = dict()
    if path is not None:
        try:
            data = YamlLoader.load(path)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} is not a mapping")

    env: dict[str, Any] = dict()
    if env_file is not None and os.path.exists(env_file):
        env.update(dotenv_values(env_file))
    env.update(os.environ if environ is None else environ)
    for field in _ENV_FIELDS:
        value = env.get(f"{ENV_PREFIX}{field.upper()}")
        if value is not None:
            data[field] = value

    try:
        return PanelConfig.from_dict(data)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
