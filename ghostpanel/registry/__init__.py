from ._auth import BearerChallenge, parse_bearer_challenge
from ._models import (
    MANIFEST_V2_MEDIA_TYPE,
    Descriptor,
    ImageInfo,
    ImageManifest,
    ImageSearchResult,
    LayerInfo,
    RegistryConfig,
    RegistryView,
    RepositoryList,
    TagList,
)
from .client import RegistryClient
from .manager import RegistryManager

__all__ = [
    "MANIFEST_V2_MEDIA_TYPE",
    "BearerChallenge",
    "Descriptor",
    "ImageInfo",
    "ImageManifest",
    "ImageSearchResult",
    "LayerInfo",
    "RegistryClient",
    "RegistryConfig",
    "RegistryManager",
    "RegistryView",
    "RepositoryList",
    "TagList",
    "parse_bearer_challenge",
]
