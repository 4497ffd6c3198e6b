"""
In-memory runtime provider.

Serves the runtime contract from a local container set without any
network calls. Mutating operations sleep to stand in for runtime latency.
"""

from __future__ import annotations

__all__ = ["Memory"]

import asyncio
import threading
import uuid
from datetime import datetime, timezone
from typing import Any

from ghostpanel.core import Provider, Response, get_logger
from ghostpanel.core.exceptions import ConflictError, NotFoundError

from .._models import (
    Container,
    ContainerFilter,
    ContainerLogsRequest,
    ContainerStats,
    ContainerStatus,
    CreateContainerRequest,
    RuntimeSystemInfo,
)

logger = get_logger(__name__)

DELAYS = {
    "start": 0.5,
    "stop": 1.0,
    "restart": 1.5,
    "remove": 0.8,
}
DEFAULT_DELAY = 0.1
KILLED_EXIT_CODE = 137
REMOVE_GUARDED = ("Running", "Restarting", "Paused")
MB = 1024 * 1024


class Memory(Provider):
    latency: float

    _containers: dict[str, Container]
    _logs: dict[str, list[tuple[datetime, str]]]
    _lock: threading.Lock

    def __init__(
        self,
        containers: list[Container | dict] | None = None,
        latency: float = 1.0,
        **kwargs,
    ):
        """Initialize.

        Args:
            containers:
                Initial container set.
            latency:
                Multiplier for the artificial delays. 0 disables them.
        """
        self.latency = latency
        self._containers = dict()
        self._logs = dict()
        self._lock = threading.Lock()
        for item in containers or []:
            container = (
                item
                if isinstance(item, Container)
                else Container.from_dict(item)
            )
            self._containers[container.id] = container
            self._logs[container.id] = []
        super().__init__(**kwargs)

    async def aping(self) -> Response[bool]:
        return Response(result=True)

    async def asystem_info(self) -> Response[RuntimeSystemInfo]:
        with self._lock:
            containers = list(self._containers.values())
        kinds = [c.status.kind for c in containers]
        info = RuntimeSystemInfo(
            version="memory",
            api_version="1",
            runtime="memory",
            kernel_version="",
            os="memory",
            architecture="",
            cpus=0,
            memory_total=0,
            storage_driver="memory",
            containers_running=kinds.count("Running"),
            containers_paused=kinds.count("Paused"),
            containers_stopped=len(kinds)
            - kinds.count("Running")
            - kinds.count("Paused"),
            images_count=len({c.image for c in containers}),
        )
        return Response(result=info)

    async def alist_containers(
        self,
        filter: ContainerFilter | None = None,
    ) -> Response[list[Container]]:
        with self._lock:
            containers = [
                c.copy(deep=True) for c in self._containers.values()
            ]
        if filter is not None:
            containers = [c for c in containers if _matches(c, filter)]
        return Response(result=containers)

    async def aget_container(self, id: str) -> Response[Container]:
        with self._lock:
            container = self._get(id)
            return Response(result=container.copy(deep=True))

    async def acreate_container(
        self,
        request: CreateContainerRequest,
    ) -> Response[Container]:
        await self._delay("create")
        id = uuid.uuid4().hex
        container = Container(
            id=id,
            name=request.name or f"container-{id[:12]}",
            image=request.image,
            status=ContainerStatus(kind="Created"),
            ports=request.ports,
            volumes=request.volumes,
            networks=request.networks,
            env=request.env,
            labels=request.labels,
            created_at=_now(),
            gaming_config=request.gaming_config,
            gpu_allocation=request.gpu_allocation,
        )
        with self._lock:
            names = {c.name for c in self._containers.values()}
            if container.name in names:
                raise ConflictError(
                    f"Container name already in use: {container.name}"
                )
            self._containers[id] = container
            self._logs[id] = []
        logger.info("Created container %s (%s)", container.name, id)
        return Response(result=container.copy(deep=True))

    async def astart_container(self, id: str) -> Response[None]:
        self._exists(id)
        await self._delay("start")
        with self._lock:
            container = self._get(id)
            if container.status.kind != "Running":
                self._update(
                    container,
                    status=ContainerStatus(kind="Running"),
                    started_at=_now(),
                    finished_at=None,
                )
                self._log(id, "Container started")
        return Response(result=None)

    async def astop_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        self._exists(id)
        await self._delay("stop")
        with self._lock:
            container = self._get(id)
            if container.status.kind in ("Running", "Paused", "Restarting"):
                self._update(
                    container,
                    status=ContainerStatus.exited(0),
                    finished_at=_now(),
                )
                self._log(id, "Container stopped")
        return Response(result=None)

    async def arestart_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        self._exists(id)
        await self._delay("restart")
        with self._lock:
            container = self._get(id)
            self._update(
                container,
                status=ContainerStatus(kind="Running"),
                started_at=_now(),
                finished_at=None,
            )
            self._log(id, "Container restarted")
        return Response(result=None)

    async def apause_container(self, id: str) -> Response[None]:
        self._exists(id)
        await self._delay("pause")
        with self._lock:
            container = self._get(id)
            if container.status.kind != "Running":
                raise ConflictError(f"Container {id} is not running")
            self._update(container, status=ContainerStatus(kind="Paused"))
            self._log(id, "Container paused")
        return Response(result=None)

    async def aunpause_container(self, id: str) -> Response[None]:
        self._exists(id)
        await self._delay("unpause")
        with self._lock:
            container = self._get(id)
            if container.status.kind != "Paused":
                raise ConflictError(f"Container {id} is not paused")
            self._update(container, status=ContainerStatus(kind="Running"))
            self._log(id, "Container unpaused")
        return Response(result=None)

    async def akill_container(
        self,
        id: str,
        signal: str | None = None,
    ) -> Response[None]:
        self._exists(id)
        await self._delay("kill")
        with self._lock:
            container = self._get(id)
            if container.status.kind not in ("Running", "Paused"):
                raise ConflictError(f"Container {id} is not running")
            self._update(
                container,
                status=ContainerStatus.exited(KILLED_EXIT_CODE),
                finished_at=_now(),
            )
            self._log(id, f"Container killed ({signal or 'SIGKILL'})")
        return Response(result=None)

    async def aremove_container(
        self,
        id: str,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Response[None]:
        self._exists(id)
        await self._delay("remove")
        with self._lock:
            container = self._get(id)
            if not force and container.status.kind in REMOVE_GUARDED:
                raise ConflictError(
                    f"Container {id} is {container.status.kind.lower()}; "
                    "stop it or force removal"
                )
            del self._containers[id]
            self._logs.pop(id, None)
        logger.info("Removed container %s", id)
        return Response(result=None)

    async def aget_container_logs(
        self,
        request: ContainerLogsRequest,
    ) -> Response[str]:
        with self._lock:
            self._get(request.container_id)
            entries = list(self._logs.get(request.container_id, []))
        if request.since is not None:
            since = _as_utc(request.since)
            entries = [e for e in entries if e[0] > since]
        if request.tail is not None:
            entries = entries[-request.tail :] if request.tail > 0 else []
        lines = [
            f"{ts.isoformat()} {text}" if request.timestamps else text
            for ts, text in entries
        ]
        return Response(result="\n".join(lines))

    async def aget_container_stats(self, id: str) -> Response[ContainerStats]:
        with self._lock:
            container = self._get(id)
        metrics = container.performance_metrics
        stats = ContainerStats(
            container_id=id,
            timestamp=_now(),
            cpu_percent=metrics.cpu_usage if metrics else 0.0,
            memory_usage=metrics.memory_usage.used_mb * MB if metrics else 0,
            memory_limit=metrics.memory_usage.limit_mb * MB if metrics else 0,
            network_rx=metrics.network_io.rx_bytes if metrics else 0,
            network_tx=metrics.network_io.tx_bytes if metrics else 0,
            block_read=metrics.disk_io.read_bytes if metrics else 0,
            block_write=metrics.disk_io.write_bytes if metrics else 0,
            pid_count=1 if container.status.is_running else 0,
        )
        return Response(result=stats)

    async def aexec_container(
        self,
        id: str,
        cmd: list[str],
        interactive: bool = False,
    ) -> Response[str]:
        self._exists(id)
        await self._delay("exec")
        with self._lock:
            container = self._get(id)
            if container.status.kind != "Running":
                raise ConflictError(f"Container {id} is not running")
            self._log(id, f"exec: {' '.join(cmd)}")
        return Response(result="")

    async def _delay(self, action: str) -> None:
        if self.latency > 0:
            delay = DELAYS.get(action, DEFAULT_DELAY)
            await asyncio.sleep(delay * self.latency)

    def _exists(self, id: str) -> None:
        with self._lock:
            self._get(id)

    def _get(self, id: str) -> Container:
        container = self._containers.get(id)
        if container is None:
            raise NotFoundError(f"Container not found: {id}")
        return container

    def _update(self, container: Container, **changes: Any) -> None:
        self._containers[container.id] = container.copy(update=changes)

    def _log(self, id: str, text: str) -> None:
        self._logs.setdefault(id, []).append((_now(), text))


def _matches(container: Container, filter: ContainerFilter) -> bool:
    if filter.status is not None:
        if container.status.kind != filter.status.kind:
            return False
        if filter.status.code is not None and (
            container.status.code != filter.status.code
        ):
            return False
    if filter.name_contains and filter.name_contains not in container.name:
        return False
    if filter.image_contains and filter.image_contains not in container.image:
        return False
    if filter.has_gaming_config is not None and filter.has_gaming_config != (
        container.gaming_config is not None
    ):
        return False
    if filter.has_gpu is not None and filter.has_gpu != (
        container.gpu_allocation is not None
    ):
        return False
    if filter.network and filter.network not in container.networks:
        return False
    return True


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

