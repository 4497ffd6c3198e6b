from typing import Any

from ._async_helper import run_async, run_sync
from ._operation import Operation
from .exceptions import NotSupportedError


class Provider:
    """Backend implementation a component is bound to.

    A provider implements an operation either as a plain method named
    after the operation or as a coroutine with an `a` prefix. Whichever
    form is missing is bridged from the other.
    """

    __component__: Any
    __type__: str

    def __init__(self, **kwargs):
        self.__type__ = kwargs.pop("__type__", self.__class__.__module__)
        for key, value in kwargs.items():
            setattr(self, key, value)

    def __run__(self, operation: Operation) -> Any:
        func = getattr(self, operation.name, None)
        if func is not None and callable(func):
            return func(**(operation.args or {}))

        afunc = getattr(self, f"a{operation.name}", None)
        if afunc is not None and callable(afunc):
            return run_sync(afunc, **(operation.args or {}))
        raise NotSupportedError(str(operation))

    async def __arun__(self, operation: Operation) -> Any:
        afunc = getattr(self, f"a{operation.name}", None)
        if afunc is not None and callable(afunc):
            return await afunc(**(operation.args or {}))

        return await run_async(self.__run__, operation)
