from __future__ import annotations

import importlib
import inspect
from typing import Any

from ._operation import Operation
from ._provider import Provider
from .exceptions import ConfigError, NotSupportedError


class Component:
    """Public face of a capability, delegating to a bound provider.

    The provider is passed as `__provider__`: either an instance, a
    provider name resolved against the component's `providers` package,
    or a dict with `type` and `parameters`.
    """

    __provider__: Provider
    __type__: str

    def __init__(self, **kwargs):
        self.__type__ = kwargs.pop("__type__", self.__class__.__module__)
        if "__provider__" in kwargs:
            self.__bind__(kwargs.pop("__provider__"))

    def __bind__(self, provider: Provider | dict | str | None) -> None:
        if provider is None:
            return
        if isinstance(provider, Provider):
            provider.__component__ = self
            self.__provider__ = provider
            return
        if isinstance(provider, dict):
            provider = dict(provider)
            type = provider.pop("type")
            parameters = provider.pop("parameters", None) or dict()
        else:
            type = provider
            parameters = dict()
        package = self.__class__.__module__.rsplit(".", 1)[0]
        self.__bind__(
            load_provider(f"{package}.providers.{type}", parameters)
        )

    def __run__(self, operation: Operation) -> Any:
        if not hasattr(self, "__provider__"):
            raise NotSupportedError(str(operation))
        return self.__provider__.__run__(operation)

    async def __arun__(self, operation: Operation) -> Any:
        if not hasattr(self, "__provider__"):
            raise NotSupportedError(str(operation))
        return await self.__provider__.__arun__(operation)


def load_provider(path: str, parameters: dict[str, Any]) -> Provider:
    try:
        module = importlib.import_module(path)
    except ModuleNotFoundError as e:
        raise ConfigError(f"Provider {path} not found") from e
    for _, cls in inspect.getmembers(module, inspect.isclass):
        if issubclass(cls, Provider) and cls.__module__ == module.__name__:
            return cls(**parameters)
    raise ConfigError(f"No provider class defined in {path}")
