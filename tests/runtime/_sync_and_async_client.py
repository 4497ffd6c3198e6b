from common.sync_and_async_client import SyncAndAsyncClient

from ._providers import get_component


class RuntimeSyncAndAsyncClient(SyncAndAsyncClient):
    def __init__(self, provider_type: str, async_call: bool):
        self.client = get_component(provider_type)
        self.async_call = async_call
        self.provider_type = provider_type

    async def ping(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def system_info(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def list_containers(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def get_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def create_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def start_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def stop_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def restart_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def pause_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def unpause_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def kill_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def remove_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def get_container_logs(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def get_container_stats(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def exec_container(self, **kwargs):
        return await self._execute_method(**kwargs)

    async def close(self, **kwargs):
        return await self._execute_method(**kwargs)
