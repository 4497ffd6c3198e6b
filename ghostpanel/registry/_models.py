from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, field_validator

from ghostpanel.core import DataModel, DataModelField

MANIFEST_V2_MEDIA_TYPE = "application/vnd.docker.distribution.manifest.v2+json"


class RegistryConfig(DataModel):
    """Registry connection settings.

    Attributes:
        name: Unique registry name.
        url: Base URL, e.g. https://registry-1.docker.io.
        username: Username for token authentication.
        password: Password for token authentication.
        insecure: Skip TLS verification.
        timeout: HTTP timeout in seconds.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    url: str
    username: str | None = None
    password: str | None = DataModelField(default=None, repr=False)
    insecure: bool = False
    timeout: float = 30

    @field_validator("url")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def has_auth(self) -> bool:
        return self.username is not None and self.password is not None


class RegistryView(DataModel):
    """Registry settings safe to hand out. Secrets are never included.

    Attributes:
        name: Registry name.
        url: Base URL.
        insecure: TLS verification is skipped.
        has_auth: Credentials are configured.
    """

    name: str
    url: str
    insecure: bool
    has_auth: bool


class Descriptor(DataModel):
    """Content descriptor of a layer or config blob.

    Attributes:
        media_type: Media type.
        size: Declared size in bytes.
        digest: Content address.
        urls: Alternate download locations.
    """

    media_type: str = DataModelField(alias="mediaType")
    size: int
    digest: str
    urls: list[str] | None = None


class ImageManifest(DataModel):
    """Image manifest, schema 2.

    Attributes:
        schema_version: Schema version.
        media_type: Manifest media type.
        config: Config blob descriptor.
        layers: Layer descriptors.
    """

    schema_version: int = DataModelField(alias="schemaVersion")
    media_type: str = DataModelField(
        alias="mediaType", default=MANIFEST_V2_MEDIA_TYPE
    )
    config: Descriptor
    layers: list[Descriptor] = []


class RepositoryList(DataModel):
    repositories: list[str] = []

    @field_validator("repositories", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return value or []


class TagList(DataModel):
    name: str
    tags: list[str] = []

    @field_validator("tags", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return value or []


class LayerInfo(DataModel):
    """Layer of an image.

    Attributes:
        digest: Layer digest.
        size: Layer size in bytes.
        media_type: Layer media type.
        created_by: Build step that produced the layer. Not populated.
    """

    digest: str
    size: int
    media_type: str
    created_by: str | None = None


class ImageInfo(DataModel):
    """Image summary assembled from a manifest and its config blob.

    Attributes:
        repository: Repository name.
        tag: Tag.
        digest: Config blob digest (image id).
        size: Sum of layer sizes in bytes.
        created: Creation time in UTC.
        author: Image author.
        layers: Layers.
    """

    repository: str
    tag: str
    digest: str
    size: int
    created: datetime
    author: str | None = None
    layers: list[LayerInfo] = []


class ImageSearchResult(DataModel):
    """Federated search hit.

    Attributes:
        registry: Name of the registry the image was found in.
        image: Image summary.
    """

    registry: str
    image: ImageInfo
