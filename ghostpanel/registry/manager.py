"""
Named collection of registry clients with federated search.
"""

from __future__ import annotations

__all__ = ["RegistryManager"]

import asyncio
import threading
from typing import Any

from ghostpanel.core import (
    Response,
    bounded,
    gather_settled,
    get_logger,
    run_sync,
)

from ._models import ImageInfo, ImageSearchResult, RegistryConfig, RegistryView
from .client import RegistryClient

logger = get_logger(__name__)

DEFAULT_SEARCH_CONCURRENCY = 8


class RegistryManager:
    """Registry clients keyed by name.

    The map is guarded by a lock that is only held to change membership
    or to snapshot the current clients, never across a request. Adding a
    registry under an existing name replaces the previous client once the
    new one has authenticated.
    """

    max_concurrency: int
    nparams: dict[str, Any]

    _registries: dict[str, RegistryClient]
    _lock: threading.Lock

    def __init__(
        self,
        max_concurrency: int = DEFAULT_SEARCH_CONCURRENCY,
        nparams: dict[str, Any] | None = None,
    ):
        """Initialize.

        Args:
            max_concurrency:
                Maximum number of registry requests in flight during a
                federated search.
            nparams:
                Native params to the httpx client of every registry.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.max_concurrency = max_concurrency
        self.nparams = nparams or dict()
        self._registries = dict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._registries)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._registries

    def add_registry(self, config: RegistryConfig) -> Response[RegistryView]:
        """Register a registry and authenticate with it.

        Args:
            config: Registry configuration.

        Returns:
            Redacted view of the registered registry.

        Raises:
            AuthError: Authentication failed; nothing is registered.
        """
        return run_sync(self.aadd_registry, config)

    def remove_registry(self, name: str) -> bool:
        """Remove a registry.

        Args:
            name: Registry name.

        Returns:
            Whether a registry with that name existed.
        """
        with self._lock:
            client = self._registries.pop(name, None)
        if client is not None:
            logger.info("Removed registry %s", name)
        return client is not None

    def get_registry(self, name: str) -> RegistryClient | None:
        with self._lock:
            return self._registries.get(name)

    def list_registries(self) -> list[str]:
        with self._lock:
            return sorted(self._registries)

    def registries(self) -> list[RegistryView]:
        return [client.view() for client in self._snapshot()]

    def search_images(self, query: str) -> Response[list[ImageSearchResult]]:
        """Search every registry for repositories containing `query`.

        Registries and repositories that fail are skipped; the result holds
        everything that succeeded.

        Args:
            query: Substring to match repository names against.

        Returns:
            One result per matching repository tag.
        """
        return run_sync(self.asearch_images, query)

    async def aadd_registry(
        self, config: RegistryConfig
    ) -> Response[RegistryView]:
        client = RegistryClient(config, nparams=self.nparams)
        await client.aauthenticate()
        with self._lock:
            replaced = config.name in self._registries
            self._registries[config.name] = client
        if replaced:
            logger.info("Replaced registry %s (%s)", config.name, config.url)
        else:
            logger.info("Added registry %s (%s)", config.name, config.url)
        return Response(result=client.view())

    async def asearch_images(
        self, query: str
    ) -> Response[list[ImageSearchResult]]:
        semaphore = asyncio.Semaphore(self.max_concurrency)
        clients = self._snapshot()
        outcomes = await gather_settled(
            self._search_registry(client, query, semaphore)
            for client in clients
        )
        results: list[ImageSearchResult] = []
        for client, outcome in zip(clients, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(
                    "Search skipped registry %s: %s", client.name, outcome
                )
                continue
            results.extend(
                ImageSearchResult(registry=client.name, image=image)
                for image in outcome
            )
        return Response(result=results)

    async def _search_registry(
        self,
        client: RegistryClient,
        query: str,
        semaphore: asyncio.Semaphore,
    ) -> list[ImageInfo]:
        response = await bounded(semaphore, client.alist_repositories)
        repositories = sorted(
            repo for repo in response.result if query in repo
        )
        outcomes = await gather_settled(
            self._search_repository(client, repo, semaphore)
            for repo in repositories
        )
        images: list[ImageInfo] = []
        for repo, outcome in zip(repositories, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(
                    "Search skipped %s/%s: %s", client.name, repo, outcome
                )
                continue
            images.extend(outcome)
        return images

    async def _search_repository(
        self,
        client: RegistryClient,
        repository: str,
        semaphore: asyncio.Semaphore,
    ) -> list[ImageInfo]:
        response = await bounded(semaphore, client.alist_tags, repository)
        tags = sorted(response.result)
        outcomes = await gather_settled(
            bounded(semaphore, client.aget_image_info, repository, tag)
            for tag in tags
        )
        images: list[ImageInfo] = []
        for tag, outcome in zip(tags, outcomes):
            if isinstance(outcome, Exception):
                logger.warning(
                    "Search skipped %s/%s:%s: %s",
                    client.name,
                    repository,
                    tag,
                    outcome,
                )
                continue
            images.append(outcome.result)
        return images

    def _snapshot(self) -> list[RegistryClient]:
        with self._lock:
            return [
                self._registries[name] for name in sorted(self._registries)
            ]
