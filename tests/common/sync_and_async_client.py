import inspect
from typing import Any


class SyncAndAsyncClient:
    """Calls the sync or async form of the client method named after the
    calling wrapper method."""

    client: Any
    async_call: bool

    async def _execute_method(self, **kwargs):
        method_name = inspect.stack()[1].function
        if self.async_call:
            return await getattr(self.client, f"a{method_name}")(**kwargs)
        return getattr(self.client, method_name)(**kwargs)
