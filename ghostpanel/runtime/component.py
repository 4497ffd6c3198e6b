from ghostpanel.core import Component, Response, operation

from ._models import (
    Container,
    ContainerFilter,
    ContainerLogsRequest,
    ContainerStats,
    CreateContainerRequest,
    RuntimeSystemInfo,
)


class RuntimeClient(Component):
    def __init__(self, **kwargs):
        """Initialize.

        Args:
            __provider__:
                Runtime backend: "bolt", "memory", a provider instance,
                or a dict with `type` and `parameters`.
        """
        super().__init__(**kwargs)

    @operation()
    def ping(self) -> Response[bool]:
        """Check whether the runtime is reachable.

        Returns:
            True if the runtime answered. Never raises for an
            unreachable runtime.
        """
        ...

    @operation()
    def system_info(self) -> Response[RuntimeSystemInfo]:
        """Get runtime host information.

        Returns:
            System information.
        """
        ...

    @operation()
    def list_containers(
        self,
        filter: ContainerFilter | None = None,
    ) -> Response[list[Container]]:
        """List containers.

        Args:
            filter: Server-side filter. If None, list all containers.

        Returns:
            Containers.
        """
        ...

    @operation()
    def get_container(self, id: str) -> Response[Container]:
        """Get a container.

        Args:
            id: Container id.

        Returns:
            Container.
        """
        ...

    @operation()
    def create_container(
        self,
        request: CreateContainerRequest,
    ) -> Response[Container]:
        """Create a container.

        Args:
            request: Container to create.

        Returns:
            Created container with its assigned id.
        """
        ...

    @operation()
    def start_container(self, id: str) -> Response[None]:
        """Start a container.

        Args:
            id: Container id.
        """
        ...

    @operation()
    def stop_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        """Stop a container.

        Args:
            id: Container id.
            timeout: Seconds to wait before killing. Runtime default if None.
        """
        ...

    @operation()
    def restart_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        """Restart a container.

        Args:
            id: Container id.
            timeout: Seconds to wait for the stop. Runtime default if None.
        """
        ...

    @operation()
    def pause_container(self, id: str) -> Response[None]:
        """Pause a container.

        Args:
            id: Container id.
        """
        ...

    @operation()
    def unpause_container(self, id: str) -> Response[None]:
        """Unpause a container.

        Args:
            id: Container id.
        """
        ...

    @operation()
    def kill_container(
        self,
        id: str,
        signal: str | None = None,
    ) -> Response[None]:
        """Kill a container.

        Args:
            id: Container id.
            signal: Signal name, e.g. SIGKILL. Runtime default if None.
        """
        ...

    @operation()
    def remove_container(
        self,
        id: str,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Response[None]:
        """Remove a container.

        Args:
            id: Container id.
            force: Remove even if running.
            remove_volumes: Also remove anonymous volumes.
        """
        ...

    @operation()
    def get_container_logs(
        self,
        request: ContainerLogsRequest,
    ) -> Response[str]:
        """Get container logs.

        Args:
            request: Log query.

        Returns:
            Log text.
        """
        ...

    @operation()
    def get_container_stats(self, id: str) -> Response[ContainerStats]:
        """Get a point-in-time stats snapshot.

        Args:
            id: Container id.

        Returns:
            Container stats.
        """
        ...

    @operation()
    def exec_container(
        self,
        id: str,
        cmd: list[str],
        interactive: bool = False,
    ) -> Response[str]:
        """Run a command in a container.

        Args:
            id: Container id.
            cmd: Command and arguments.
            interactive: Allocate a TTY and keep stdin open.

        Returns:
            Command output.
        """
        ...

    @operation()
    def close(self) -> Response[None]:
        """Close the runtime client."""
        return Response(result=None)

    @operation()
    async def aping(self) -> Response[bool]:
        """Check whether the runtime is reachable."""
        ...

    @operation()
    async def asystem_info(self) -> Response[RuntimeSystemInfo]:
        """Get runtime host information."""
        ...

    @operation()
    async def alist_containers(
        self,
        filter: ContainerFilter | None = None,
    ) -> Response[list[Container]]:
        """List containers."""
        ...

    @operation()
    async def aget_container(self, id: str) -> Response[Container]:
        """Get a container."""
        ...

    @operation()
    async def acreate_container(
        self,
        request: CreateContainerRequest,
    ) -> Response[Container]:
        """Create a container."""
        ...

    @operation()
    async def astart_container(self, id: str) -> Response[None]:
        """Start a container."""
        ...

    @operation()
    async def astop_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        """Stop a container."""
        ...

    @operation()
    async def arestart_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        """Restart a container."""
        ...

    @operation()
    async def apause_container(self, id: str) -> Response[None]:
        """Pause a container."""
        ...

    @operation()
    async def aunpause_container(self, id: str) -> Response[None]:
        """Unpause a container."""
        ...

    @operation()
    async def akill_container(
        self,
        id: str,
        signal: str | None = None,
    ) -> Response[None]:
        """Kill a container."""
        ...

    @operation()
    async def aremove_container(
        self,
        id: str,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Response[None]:
        """Remove a container."""
        ...

    @operation()
    async def aget_container_logs(
        self,
        request: ContainerLogsRequest,
    ) -> Response[str]:
        """Get container logs."""
        ...

    @operation()
    async def aget_container_stats(self, id: str) -> Response[ContainerStats]:
        """Get a point-in-time stats snapshot."""
        ...

    @operation()
    async def aexec_container(
        self,
        id: str,
        cmd: list[str],
        interactive: bool = False,
    ) -> Response[str]:
        """Run a command in a container."""
        ...

    @operation()
    async def aclose(self) -> Response[None]:
        """Close the runtime client."""
        return Response(result=None)
