"""
Runtime provider for the Bolt HTTP control API.
"""

from __future__ import annotations

__all__ = ["Bolt"]

import json
from typing import Any

import httpx
from pydantic import ValidationError

from ghostpanel.core import Provider, Response, get_logger
from ghostpanel.core.exceptions import (
    ContainerError,
    NetworkError,
    SerializationError,
    http_error,
)

from .._models import (
    Container,
    ContainerFilter,
    ContainerLogsRequest,
    ContainerOperation,
    ContainerStats,
    CreateContainerRequest,
    RuntimeEnvelope,
    RuntimeSystemInfo,
)

logger = get_logger(__name__)


class Bolt(Provider):
    endpoint: str
    timeout: float | None
    nparams: dict[str, Any]

    def __init__(
        self,
        endpoint: str = "http://localhost:8080",
        timeout: float | None = 30,
        nparams: dict[str, Any] | None = None,
        **kwargs,
    ):
        """Initialize.

        Args:
            endpoint:
                Base URL of the runtime API.
            timeout:
                HTTP timeout. Defaults to 30 seconds.
            nparams:
                Native params to httpx client.
        """
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.nparams = nparams or dict()
        super().__init__(**kwargs)

    async def aping(self) -> Response[bool]:
        try:
            response = await self._request("GET", "/ping")
        except NetworkError as e:
            logger.warning("Failed to ping runtime: %s", e)
            return Response(result=False)
        if not response.is_success:
            logger.warning("Runtime ping returned %s", response.status_code)
            return Response(result=False)
        logger.debug("Runtime is available at %s", self.endpoint)
        return Response(result=True)

    async def asystem_info(self) -> Response[RuntimeSystemInfo]:
        response = await self._request("GET", "/system/info")
        info = self._unwrap(response, RuntimeSystemInfo, "System info")
        return Response(result=info)

    async def alist_containers(
        self,
        filter: ContainerFilter | None = None,
    ) -> Response[list[Container]]:
        response = await self._request(
            "GET", "/containers", params=self._filter_params(filter)
        )
        containers = self._unwrap(
            response, list[Container], "Failed to list containers"
        )
        logger.info("Retrieved %s containers from runtime", len(containers))
        return Response(result=containers)

    async def aget_container(self, id: str) -> Response[Container]:
        response = await self._request("GET", f"/containers/{id}")
        container = self._unwrap(
            response, Container, f"Failed to get container {id}"
        )
        return Response(result=container)

    async def acreate_container(
        self,
        request: CreateContainerRequest,
    ) -> Response[Container]:
        response = await self._request(
            "POST", "/containers", body=request.to_dict()
        )
        container = self._unwrap(
            response, Container, "Failed to create container"
        )
        logger.info("Created container %s (%s)", container.name, container.id)
        return Response(result=container)

    async def astart_container(self, id: str) -> Response[None]:
        return await self._operate(id, "start")

    async def astop_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        options = {"timeout": timeout} if timeout is not None else {}
        return await self._operate(id, "stop", options)

    async def arestart_container(
        self,
        id: str,
        timeout: int | None = None,
    ) -> Response[None]:
        options = {"timeout": timeout} if timeout is not None else {}
        return await self._operate(id, "restart", options)

    async def apause_container(self, id: str) -> Response[None]:
        return await self._operate(id, "pause")

    async def aunpause_container(self, id: str) -> Response[None]:
        return await self._operate(id, "unpause")

    async def akill_container(
        self,
        id: str,
        signal: str | None = None,
    ) -> Response[None]:
        options = {"signal": signal} if signal is not None else {}
        return await self._operate(id, "kill", options)

    async def aremove_container(
        self,
        id: str,
        force: bool = False,
        remove_volumes: bool = False,
    ) -> Response[None]:
        return await self._operate(
            id, "remove", {"force": force, "volumes": remove_volumes}
        )

    async def aget_container_logs(
        self,
        request: ContainerLogsRequest,
    ) -> Response[str]:
        params: dict[str, Any] = {
            "follow": _flag(request.follow),
            "timestamps": _flag(request.timestamps),
        }
        if request.tail is not None:
            params["tail"] = request.tail
        if request.since is not None:
            params["since"] = int(request.since.timestamp())
        response = await self._request(
            "GET", f"/containers/{request.container_id}/logs", params=params
        )
        logs = self._unwrap(response, str, "Failed to get logs")
        return Response(result=logs)

    async def aget_container_stats(self, id: str) -> Response[ContainerStats]:
        response = await self._request("GET", f"/containers/{id}/stats")
        stats = self._unwrap(response, ContainerStats, "Failed to get stats")
        return Response(result=stats)

    async def aexec_container(
        self,
        id: str,
        cmd: list[str],
        interactive: bool = False,
    ) -> Response[str]:
        payload = {
            "cmd": cmd,
            "interactive": interactive,
            "tty": interactive,
            "attach_stdout": True,
            "attach_stderr": True,
        }
        response = await self._request(
            "POST", f"/containers/{id}/exec", body=payload
        )
        output = self._unwrap(response, str, "Failed to exec")
        return Response(result=output)

    async def _operate(
        self,
        id: str,
        action: str,
        options: dict[str, Any] | None = None,
    ) -> Response[None]:
        operation = ContainerOperation(
            action=action,
            container_id=id,
            options=options or None,
        )
        response = await self._request(
            "POST", f"/containers/{id}/action", body=operation.to_dict()
        )
        self._unwrap(
            response, Any, f"Operation {action} failed", require_data=False
        )
        logger.info("Container %s operation %s completed", id, action)
        return Response(result=None)

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: Any = None,
    ) -> httpx.Response:
        url = f"{self.endpoint}{path}"
        async with httpx.AsyncClient(
            timeout=self.timeout, **self.nparams
        ) as client:
            try:
                return await client.request(
                    method, url, params=params or None, json=body
                )
            except httpx.HTTPError as e:
                raise NetworkError(f"{method} {url} failed: {e}") from e

    def _unwrap(
        self,
        response: httpx.Response,
        data_type: Any,
        message: str,
        require_data: bool = True,
    ) -> Any:
        if not response.is_success:
            error = _embedded_error(response)
            raise http_error(
                response.status_code,
                f"{message}: {error or response.status_code}",
            )
        try:
            envelope = RuntimeEnvelope[data_type].model_validate_json(
                response.content
            )
        except ValidationError as e:
            raise SerializationError(f"{message}: {e}") from e
        if not envelope.success or envelope.error is not None:
            raise ContainerError(
                f"{message}: {envelope.error or 'runtime reported failure'}"
            )
        if require_data and envelope.data is None:
            raise SerializationError(f"{message}: response has no data")
        return envelope.data

    def _filter_params(
        self, filter: ContainerFilter | None
    ) -> dict[str, Any] | None:
        if filter is None:
            return None
        params: dict[str, Any] = {}
        if filter.status is not None:
            params["status"] = json.dumps(filter.status.to_dict())
        if filter.name_contains is not None:
            params["name"] = filter.name_contains
        if filter.image_contains is not None:
            params["image"] = filter.image_contains
        if filter.has_gaming_config is not None:
            params["gaming"] = _flag(filter.has_gaming_config)
        if filter.has_gpu is not None:
            params["gpu"] = _flag(filter.has_gpu)
        if filter.network is not None:
            params["network"] = filter.network
        return params or None


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _embedded_error(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return None
