from ._models import (
    AudioConfig,
    AudioLatency,
    AudioSystem,
    Container,
    ContainerFilter,
    ContainerLogsRequest,
    ContainerOperation,
    ContainerStats,
    ContainerStatus,
    CreateContainerRequest,
    DiskIo,
    GamingConfig,
    GamingMetrics,
    GpuAllocation,
    GpuType,
    GpuUsage,
    IsolationLevel,
    MemoryUsage,
    NetworkIo,
    OptimizationProfile,
    PerformanceMetrics,
    PortMapping,
    Protocol,
    RestartPolicy,
    RuntimeEnvelope,
    RuntimeSystemInfo,
    VolumeMount,
    VolumeType,
)
from .component import RuntimeClient

__all__ = [
    "AudioConfig",
    "AudioLatency",
    "AudioSystem",
    "Container",
    "ContainerFilter",
    "ContainerLogsRequest",
    "ContainerOperation",
    "ContainerStats",
    "ContainerStatus",
    "CreateContainerRequest",
    "DiskIo",
    "GamingConfig",
    "GamingMetrics",
    "GpuAllocation",
    "GpuType",
    "GpuUsage",
    "IsolationLevel",
    "MemoryUsage",
    "NetworkIo",
    "OptimizationProfile",
    "PerformanceMetrics",
    "PortMapping",
    "Protocol",
    "RestartPolicy",
    "RuntimeClient",
    "RuntimeEnvelope",
    "RuntimeSystemInfo",
    "VolumeMount",
    "VolumeType",
]
