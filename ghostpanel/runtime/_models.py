from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Generic, Literal, TypeVar

from pydantic import model_serializer, model_validator

from ghostpanel.core import DataModel

T = TypeVar("T")

VariantFields = dict[str, tuple[str, ...]]


class TaggedVariant(DataModel):
    """Enum value that may carry fields.

    On the wire a bare variant is its name (`"Running"`) and a variant with
    fields is a single-key object (`{"Exited": {"code": 0}}`).
    """

    variant_fields: ClassVar[VariantFields] = {}

    kind: str

    @model_validator(mode="before")
    @classmethod
    def _from_wire(cls, value: Any) -> Any:
        if isinstance(value, str):
            return {"kind": value}
        if isinstance(value, dict) and "kind" not in value and len(value) == 1:
            kind, fields = next(iter(value.items()))
            return {"kind": kind, **(fields or {})}
        return value

    @model_serializer(mode="wrap")
    def _to_wire(self, handler) -> Any:
        data = handler(self)
        names = self.variant_fields.get(self.kind)
        if not names:
            return self.kind
        return {self.kind: {name: data.get(name) for name in names}}

    def __str__(self) -> str:
        names = self.variant_fields.get(self.kind)
        if not names:
            return self.kind
        fields = ", ".join(f"{n}={getattr(self, n)}" for n in names)
        return f"{self.kind}({fields})"


class ContainerStatus(TaggedVariant):
    """Container state as reported by the runtime.

    Attributes:
        kind: State name.
        code: Exit code, only for `Exited`.
    """

    variant_fields: ClassVar[VariantFields] = {"Exited": ("code",)}

    kind: Literal[
        "Created",
        "Running",
        "Paused",
        "Restarting",
        "Exited",
        "Dead",
        "Unknown",
    ]
    code: int | None = None

    @staticmethod
    def exited(code: int) -> ContainerStatus:
        return ContainerStatus(kind="Exited", code=code)

    @property
    def is_running(self) -> bool:
        return self.kind in ("Running", "Restarting")


class Protocol(str, Enum):
    TCP = "Tcp"
    UDP = "Udp"
    QUIC = "Quic"


class VolumeType(str, Enum):
    BIND = "Bind"
    VOLUME = "Volume"
    TMPFS = "Tmpfs"


class OptimizationProfile(str, Enum):
    GAMING = "Gaming"
    STREAMING = "Streaming"
    COMPETITIVE = "Competitive"
    BALANCED = "Balanced"
    POWER_SAVING = "PowerSaving"


class AudioSystem(str, Enum):
    PULSE_AUDIO = "PulseAudio"
    PIPE_WIRE = "PipeWire"
    ALSA = "Alsa"


class AudioLatency(str, Enum):
    ULTRA_LOW = "UltraLow"
    LOW = "Low"
    NORMAL = "Normal"
    HIGH = "High"


class GpuType(str, Enum):
    NVIDIA = "Nvidia"
    AMD = "Amd"
    INTEL = "Intel"


class PortMapping(DataModel):
    """Port published by a container."""

    container_port: int
    host_port: int | None = None
    protocol: Protocol = Protocol.TCP
    host_ip: str | None = None


class VolumeMount(DataModel):
    """Volume mounted into a container."""

    source: str
    target: str
    read_only: bool = False
    volume_type: VolumeType = VolumeType.VOLUME


class AudioConfig(DataModel):
    system: AudioSystem
    latency: AudioLatency


class GamingConfig(DataModel):
    """Gaming configuration of a container.

    Attributes:
        proton_version: Proton version.
        wine_version: Wine version.
        steam_app_id: Steam application id.
        optimization_profile: Tuning profile.
        audio_config: Audio setup.
    """

    proton_version: str | None = None
    wine_version: str | None = None
    steam_app_id: int | None = None
    optimization_profile: OptimizationProfile = OptimizationProfile.BALANCED
    audio_config: AudioConfig | None = None


class IsolationLevel(TaggedVariant):
    variant_fields: ClassVar[VariantFields] = {
        "Partitioned": ("partition_id",)
    }

    kind: Literal["Shared", "Exclusive", "Partitioned"]
    partition_id: str | None = None


class GpuAllocation(DataModel):
    """GPU assigned to a container.

    Attributes:
        device_id: Device id, e.g. nvidia0.
        gpu_type: GPU vendor.
        memory_mb: Reserved memory.
        compute_units: Reserved compute units.
        isolation_level: Sharing mode.
    """

    device_id: str
    gpu_type: GpuType
    memory_mb: int | None = None
    compute_units: int | None = None
    isolation_level: IsolationLevel = IsolationLevel(kind="Shared")


class MemoryUsage(DataModel):
    used_mb: int
    limit_mb: int
    percentage: float


class GpuUsage(DataModel):
    utilization: float
    memory_used_mb: int
    memory_total_mb: int
    temperature: float | None = None
    power_usage: float | None = None


class NetworkIo(DataModel):
    rx_bytes: int = 0
    tx_bytes: int = 0
    rx_packets: int = 0
    tx_packets: int = 0


class DiskIo(DataModel):
    read_bytes: int = 0
    write_bytes: int = 0
    read_ops: int = 0
    write_ops: int = 0


class GamingMetrics(DataModel):
    fps: float | None = None
    frame_time_ms: float | None = None
    input_latency_ms: float | None = None
    network_latency_ms: float | None = None
    gpu_temperature: float | None = None


class PerformanceMetrics(DataModel):
    """Point-in-time resource usage of a container."""

    cpu_usage: float
    memory_usage: MemoryUsage
    gpu_usage: GpuUsage | None = None
    network_io: NetworkIo = NetworkIo()
    disk_io: DiskIo = DiskIo()
    gaming_metrics: GamingMetrics | None = None


class Container(DataModel):
    """Container as last reported by the runtime.

    Attributes:
        id: Container id.
        name: Container name.
        image: Image reference.
        status: Current state.
        ports: Published ports.
        volumes: Mounted volumes.
        networks: Attached networks.
        env: Environment variables.
        labels: Labels.
        created_at: Creation time.
        started_at: Last start time.
        finished_at: Last exit time.
        gaming_config: Gaming configuration.
        gpu_allocation: Assigned GPU.
        performance_metrics: Latest resource usage.
    """

    id: str
    name: str
    image: str
    status: ContainerStatus
    ports: list[PortMapping] = []
    volumes: list[VolumeMount] = []
    networks: list[str] = []
    env: dict[str, str] = {}
    labels: dict[str, str] = {}
    created_at: datetime
    started_at: datetime | None = None
    finished_at: datetime | None = None
    gaming_config: GamingConfig | None = None
    gpu_allocation: GpuAllocation | None = None
    performance_metrics: PerformanceMetrics | None = None


class RestartPolicy(TaggedVariant):
    variant_fields: ClassVar[VariantFields] = {"OnFailure": ("max_retries",)}

    kind: Literal["No", "Always", "OnFailure", "UnlessStopped"]
    max_retries: int | None = None


class CreateContainerRequest(DataModel):
    """Container to create.

    Attributes:
        name: Container name. The runtime picks one if None.
        image: Image reference.
        ports: Ports to publish.
        volumes: Volumes to mount.
        networks: Networks to attach.
        env: Environment variables.
        labels: Labels.
        gaming_config: Gaming configuration.
        gpu_allocation: GPU to assign.
        restart_policy: Restart policy.
    """

    name: str | None = None
    image: str
    ports: list[PortMapping] = []
    volumes: list[VolumeMount] = []
    networks: list[str] = []
    env: dict[str, str] = {}
    labels: dict[str, str] = {}
    gaming_config: GamingConfig | None = None
    gpu_allocation: GpuAllocation | None = None
    restart_policy: RestartPolicy = RestartPolicy(kind="No")


class ContainerFilter(DataModel):
    """Server-side filter for listing containers.

    Attributes:
        status: Only containers in this state.
        name_contains: Name substring.
        image_contains: Image substring.
        has_gaming_config: Only containers with or without gaming config.
        has_gpu: Only containers with or without a GPU.
        network: Only containers attached to this network.
    """

    status: ContainerStatus | None = None
    name_contains: str | None = None
    image_contains: str | None = None
    has_gaming_config: bool | None = None
    has_gpu: bool | None = None
    network: str | None = None


class ContainerOperation(DataModel):
    """Lifecycle request posted to `/containers/{id}/action`."""

    action: str
    container_id: str
    options: dict[str, Any] | None = None


class ContainerLogsRequest(DataModel):
    """Log query.

    Attributes:
        container_id: Container id.
        follow: Ask the runtime to follow the log. A single call still
            returns one snapshot.
        tail: Number of trailing lines.
        timestamps: Prefix lines with timestamps.
        since: Only lines after this time.
    """

    container_id: str
    follow: bool = False
    tail: int | None = None
    timestamps: bool = False
    since: datetime | None = None


class ContainerStats(DataModel):
    """Point-in-time container statistics."""

    container_id: str
    timestamp: datetime
    cpu_percent: float
    memory_usage: int
    memory_limit: int
    network_rx: int = 0
    network_tx: int = 0
    block_read: int = 0
    block_write: int = 0
    pid_count: int = 0


class RuntimeSystemInfo(DataModel):
    """Runtime host information."""

    version: str
    api_version: str
    runtime: str
    kernel_version: str
    os: str
    architecture: str
    cpus: int
    memory_total: int
    storage_driver: str
    containers_running: int
    containers_paused: int
    containers_stopped: int
    images_count: int


class RuntimeEnvelope(DataModel, Generic[T]):
    """Body of every runtime API response."""

    success: bool
    data: T | None = None
    error: str | None = None
    timestamp: datetime | None = None
