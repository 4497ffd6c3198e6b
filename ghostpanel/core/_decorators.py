import inspect
from functools import wraps
from typing import Any, Callable, TypeVar, cast

from ._operation import Operation
from .exceptions import NotSupportedError

T = TypeVar("T", bound=Callable[..., Any])


def _bind_operation(func: Callable, name: str, args, kwargs) -> Operation:
    bound_args = inspect.signature(func).bind(*args, **kwargs)
    bound_args.apply_defaults()
    return Operation.normalize(name=name, args=dict(bound_args.arguments))


def operation(**config: Any) -> Callable[[T], T]:
    """Route a component method to its bound provider.

    The decorated body only runs when the provider does not implement
    the operation in either form.
    """

    def decorator(func: T) -> T:
        setattr(func, "__operation__", True)
        setattr(func, "__config__", config)
        if not inspect.iscoroutinefunction(func):

            @wraps(func)
            def wrapper(*args, **kwargs) -> Any:
                self = args[0]
                if not hasattr(self, "__provider__"):
                    return func(*args, **kwargs)
                op = _bind_operation(func, func.__name__, args, kwargs)
                try:
                    return self.__run__(op)
                except NotSupportedError:
                    return func(*args, **kwargs)

            return cast(T, wrapper)

        @wraps(func)
        async def awrapper(*args, **kwargs) -> Any:
            self = args[0]
            if not hasattr(self, "__provider__"):
                return await func(*args, **kwargs)
            op = _bind_operation(func, func.__name__[1:], args, kwargs)
            try:
                return await self.__arun__(op)
            except NotSupportedError:
                return await func(*args, **kwargs)

        return cast(T, awrapper)

    return decorator
