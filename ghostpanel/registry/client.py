"""
Docker Registry HTTP API v2 client.
"""

from __future__ import annotations

__all__ = ["RegistryClient"]

import re
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError

from ghostpanel.core import DataModel, Response, get_logger, run_sync
from ghostpanel.core.exceptions import (
    AuthError,
    ConfigError,
    NetworkError,
    SerializationError,
    http_error,
)

from ._auth import TOKEN_SCOPE, parse_bearer_challenge
from ._models import (
    MANIFEST_V2_MEDIA_TYPE,
    ImageInfo,
    ImageManifest,
    LayerInfo,
    RegistryConfig,
    RegistryView,
    RepositoryList,
    TagList,
)

logger = get_logger(__name__)

CONTENT_DIGEST_HEADER = "docker-content-digest"
RFC3339_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})"
)


class RegistryClient:
    """Client for one registry.

    Holds the registry's configuration and, after `authenticate`, the
    bearer token sent with every request. The token is never refreshed;
    a 401 on a later call surfaces as `UnauthorizedError`.
    """

    config: RegistryConfig
    nparams: dict[str, Any]

    _token: str | None

    def __init__(
        self,
        config: RegistryConfig,
        nparams: dict[str, Any] | None = None,
    ):
        """Initialize.

        Args:
            config:
                Registry configuration.
            nparams:
                Native params to the httpx client.
        """
        self.config = config
        self.nparams = nparams or dict()
        self._token = None

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def authenticated(self) -> bool:
        return self._token is not None

    def view(self) -> RegistryView:
        return RegistryView(
            name=self.config.name,
            url=self.config.url,
            insecure=self.config.insecure,
            has_auth=self.config.has_auth,
        )

    def authenticate(self) -> Response[None]:
        """Obtain a bearer token if credentials are configured.

        Without credentials this does nothing and issues no request.
        """
        return run_sync(self.aauthenticate)

    def list_repositories(self) -> Response[list[str]]:
        """List repositories in the registry catalog.

        Returns:
            Repository names.
        """
        return run_sync(self.alist_repositories)

    def list_tags(self, repository: str) -> Response[list[str]]:
        """List tags of a repository.

        Args:
            repository: Repository name.

        Returns:
            Tags.
        """
        return run_sync(self.alist_tags, repository)

    def get_manifest(
        self, repository: str, tag: str
    ) -> Response[ImageManifest]:
        """Get the schema 2 manifest of an image.

        Args:
            repository: Repository name.
            tag: Tag or digest.

        Returns:
            Image manifest.
        """
        return run_sync(self.aget_manifest, repository, tag)

    def get_blob(self, repository: str, digest: str) -> Response[Any]:
        """Get a JSON blob, such as an image config.

        Args:
            repository: Repository name.
            digest: Blob digest.

        Returns:
            Decoded blob.
        """
        return run_sync(self.aget_blob, repository, digest)

    def get_image_info(self, repository: str, tag: str) -> Response[ImageInfo]:
        """Get image summary from its manifest and config blob.

        Args:
            repository: Repository name.
            tag: Tag.

        Returns:
            Image summary.
        """
        return run_sync(self.aget_image_info, repository, tag)

    def pull_image(self, repository: str, tag: str) -> Response[None]:
        """Verify every layer of an image is present in the registry.

        No layer data is downloaded.

        Args:
            repository: Repository name.
            tag: Tag.
        """
        return run_sync(self.apull_image, repository, tag)

    def push_image(self, repository: str, tag: str) -> Response[None]:
        """Push an image. Not implemented.

        Raises:
            ConfigError: Always.
        """
        return run_sync(self.apush_image, repository, tag)

    def delete_image(self, repository: str, tag: str) -> Response[str]:
        """Delete an image by resolving its tag to a manifest digest.

        Args:
            repository: Repository name.
            tag: Tag.

        Returns:
            Deleted manifest digest.
        """
        return run_sync(self.adelete_image, repository, tag)

    async def aauthenticate(self) -> Response[None]:
        if not self.config.has_auth:
            return Response(result=None)

        logger.debug("Authenticating with registry %s", self.config.url)
        check = await self._send(
            "GET", self._url("/v2/"), authenticated=False
        )
        if check.status_code != 401:
            if not check.is_success:
                raise http_error(
                    check.status_code,
                    f"Registry {self.name} version check failed: "
                    f"{check.status_code}",
                )
            logger.debug("Registry %s does not require a token", self.name)
            return Response(result=None)

        challenge = parse_bearer_challenge(
            check.headers.get("www-authenticate")
        )
        try:
            response = await self._send(
                "GET",
                challenge.realm,
                params={"service": challenge.service, "scope": TOKEN_SCOPE},
                auth=(self.config.username, self.config.password),
                authenticated=False,
            )
        except NetworkError as e:
            raise AuthError(
                f"Token request for {self.name} failed: {e}"
            ) from e
        if not response.is_success:
            raise AuthError(
                f"Token endpoint rejected credentials for {self.name}: "
                f"{response.status_code}"
            )
        try:
            body = response.json()
        except ValueError as e:
            raise AuthError(
                f"Token endpoint for {self.name} returned no JSON"
            ) from e
        token = None
        if isinstance(body, dict):
            token = body.get("token") or body.get("access_token")
        if not isinstance(token, str) or not token:
            raise AuthError(
                f"Token endpoint for {self.name} returned no token"
            )

        self._token = token
        logger.info("Authenticated with registry %s", self.name)
        return Response(result=None)

    async def alist_repositories(self) -> Response[list[str]]:
        response = await self._send("GET", self._url("/v2/_catalog"))
        self._check(response, "Failed to list repositories")
        catalog = self._decode(response, RepositoryList)
        return Response(
            result=catalog.repositories, native=self._native(response)
        )

    async def alist_tags(self, repository: str) -> Response[list[str]]:
        response = await self._send(
            "GET", self._url(f"/v2/{repository}/tags/list")
        )
        self._check(response, f"Failed to list tags for {repository}")
        tag_list = self._decode(response, TagList)
        return Response(result=tag_list.tags, native=self._native(response))

    async def aget_manifest(
        self, repository: str, tag: str
    ) -> Response[ImageManifest]:
        response = await self._fetch_manifest(repository, tag)
        self._check(
            response, f"Failed to get manifest for {repository}:{tag}"
        )
        manifest = self._decode(response, ImageManifest)
        return Response(result=manifest, native=self._native(response))

    async def aget_blob(self, repository: str, digest: str) -> Response[Any]:
        response = await self._send(
            "GET", self._url(f"/v2/{repository}/blobs/{digest}")
        )
        self._check(response, f"Failed to get blob {digest}")
        try:
            blob = response.json()
        except ValueError as e:
            raise SerializationError(
                f"Blob {digest} is not JSON: {e}"
            ) from e
        return Response(result=blob, native=self._native(response))

    async def aget_image_info(
        self, repository: str, tag: str
    ) -> Response[ImageInfo]:
        manifest = (await self.aget_manifest(repository, tag)).result
        digest = manifest.config.digest
        blob = (await self.aget_blob(repository, digest)).result
        config = blob if isinstance(blob, dict) else dict()

        author = config.get("author")
        image = ImageInfo(
            repository=repository,
            tag=tag,
            digest=manifest.config.digest,
            size=sum(layer.size for layer in manifest.layers),
            created=_parse_created(config.get("created")),
            author=author if isinstance(author, str) else None,
            layers=[
                LayerInfo(
                    digest=layer.digest,
                    size=layer.size,
                    media_type=layer.media_type,
                )
                for layer in manifest.layers
            ],
        )
        return Response(result=image)

    async def apull_image(self, repository: str, tag: str) -> Response[None]:
        logger.info("Pulling image %s:%s from %s", repository, tag, self.name)
        manifest = (await self.aget_manifest(repository, tag)).result
        for layer in manifest.layers:
            response = await self._send(
                "HEAD", self._url(f"/v2/{repository}/blobs/{layer.digest}")
            )
            if not response.is_success:
                raise http_error(
                    response.status_code,
                    f"Layer {layer.digest} not found: {response.status_code}",
                )
        logger.info("Verified image %s:%s", repository, tag)
        return Response(result=None)

    async def apush_image(self, repository: str, tag: str) -> Response[None]:
        raise ConfigError("Push protocol is not implemented")

    async def adelete_image(self, repository: str, tag: str) -> Response[str]:
        response = await self._fetch_manifest(repository, tag)
        self._check(
            response, f"Failed to get manifest for {repository}:{tag}"
        )
        digest = response.headers.get(CONTENT_DIGEST_HEADER)
        if not digest:
            raise NetworkError(
                f"Registry returned no digest for {repository}:{tag}; "
                "cannot delete by tag"
            )

        response = await self._send(
            "DELETE", self._url(f"/v2/{repository}/manifests/{digest}")
        )
        self._check(response, f"Failed to delete {repository}@{digest}")
        logger.info("Deleted image %s:%s (%s)", repository, tag, digest)
        return Response(result=digest, native=self._native(response))

    def _url(self, path: str) -> str:
        return f"{self.config.url}{path}"

    async def _fetch_manifest(
        self, repository: str, tag: str
    ) -> httpx.Response:
        return await self._send(
            "GET",
            self._url(f"/v2/{repository}/manifests/{tag}"),
            headers={"Accept": MANIFEST_V2_MEDIA_TYPE},
        )

    async def _send(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        auth: tuple | None = None,
        authenticated: bool = True,
    ) -> httpx.Response:
        headers = dict(headers or {})
        if authenticated and self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        async with httpx.AsyncClient(
            timeout=self.config.timeout,
            verify=not self.config.insecure,
            **self.nparams,
        ) as client:
            try:
                return await client.request(
                    method, url, headers=headers, params=params, auth=auth
                )
            except httpx.HTTPError as e:
                raise NetworkError(f"{method} {url} failed: {e}") from e

    def _check(self, response: httpx.Response, message: str) -> None:
        if not response.is_success:
            raise http_error(
                response.status_code, f"{message}: {response.status_code}"
            )

    def _decode(self, response: httpx.Response, model: type[DataModel]):
        try:
            return model.model_validate_json(response.content)
        except ValidationError as e:
            raise SerializationError(
                f"Unexpected response from {response.request.url}: {e}"
            ) from e

    def _native(self, response: httpx.Response) -> dict[str, Any]:
        native: dict[str, Any] = {"status_code": response.status_code}
        if CONTENT_DIGEST_HEADER in response.headers:
            native["digest"] = response.headers[CONTENT_DIGEST_HEADER]
        return native


def _parse_created(value: Any) -> datetime:
    if isinstance(value, str) and RFC3339_PATTERN.fullmatch(value):
        try:
            created = datetime.fromisoformat(value.upper())
        except ValueError:
            created = None
        if created is not None:
            return created.astimezone(timezone.utc)
    return datetime.now(timezone.utc)
