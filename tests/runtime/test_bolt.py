import json
from datetime import datetime, timezone

import httpx
import pytest

from ghostpanel.core.exceptions import (
    ContainerError,
    InternalError,
    SerializationError,
)
from ghostpanel.runtime import (
    ContainerFilter,
    ContainerLogsRequest,
    ContainerStatus,
    CreateContainerRequest,
    RestartPolicy,
    RuntimeClient,
)

from ._fake_runtime import FakeRuntime


def make_client(runtime: FakeRuntime) -> RuntimeClient:
    return RuntimeClient(
        __provider__=dict(
            type="bolt",
            parameters={
                "endpoint": runtime.endpoint,
                "nparams": {"transport": runtime.transport()},
            },
        )
    )


def handler_client(handler) -> RuntimeClient:
    transport = httpx.MockTransport(handler)
    return RuntimeClient(
        __provider__=dict(
            type="bolt",
            parameters={"nparams": {"transport": transport}},
        )
    )


def test_list_without_filter_sends_no_query():
    runtime = FakeRuntime()
    client = make_client(runtime)

    client.list_containers()
    assert runtime.requests[-1].url.query == b""

    client.list_containers(filter=ContainerFilter())
    assert runtime.requests[-1].url.query == b""


def test_list_filter_query():
    runtime = FakeRuntime()
    client = make_client(runtime)

    client.list_containers(
        filter=ContainerFilter(
            status=ContainerStatus.exited(1),
            name_contains="cs",
            has_gpu=True,
        )
    )
    params = runtime.requests[-1].url.params
    assert json.loads(params["status"]) == {"Exited": {"code": 1}}
    assert params["name"] == "cs"
    assert params["gpu"] == "true"
    assert "image" not in params
    assert "gaming" not in params


def test_create_sends_tagged_restart_policy():
    runtime = FakeRuntime()
    client = make_client(runtime)

    request = CreateContainerRequest(
        name="ark",
        image="ark:latest",
        restart_policy=RestartPolicy(kind="OnFailure", max_retries=3),
    )
    client.create_container(request=request)
    body = json.loads(runtime.requests[-1].content)
    assert body["restart_policy"] == {"OnFailure": {"max_retries": 3}}
    assert body["image"] == "ark:latest"


def test_stop_with_timeout_posts_operation():
    runtime = FakeRuntime()
    client = make_client(runtime)
    id = client.create_container(
        request=CreateContainerRequest(name="rust", image="rust:latest")
    ).result.id
    client.start_container(id=id)

    client.stop_container(id=id, timeout=30)
    request = runtime.requests[-1]
    assert request.method == "POST"
    assert request.url.path == f"/containers/{id}/action"
    assert json.loads(request.content) == {
        "action": "stop",
        "container_id": id,
        "options": {"timeout": 30},
    }

    client.start_container(id=id)
    assert json.loads(runtime.requests[-1].content)["options"] is None


def test_logs_query():
    runtime = FakeRuntime()
    client = make_client(runtime)
    id = client.create_container(
        request=CreateContainerRequest(name="tf2", image="tf2:latest")
    ).result.id

    since = datetime(2024, 1, 1, tzinfo=timezone.utc)
    client.get_container_logs(
        request=ContainerLogsRequest(
            container_id=id, tail=10, timestamps=True, since=since
        )
    )
    params = runtime.requests[-1].url.params
    assert params["tail"] == "10"
    assert params["timestamps"] == "true"
    assert params["follow"] == "false"
    assert params["since"] == str(int(since.timestamp()))


def test_envelope_failure_raises_container_error():
    runtime = FakeRuntime()
    client = make_client(runtime)

    runtime.fail_next = "daemon is shutting down"
    with pytest.raises(ContainerError) as exc_info:
        client.list_containers()
    assert "daemon is shutting down" in str(exc_info.value)


def test_http_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"success": False, "error": "boom"})

    client = handler_client(handler)
    with pytest.raises(InternalError) as exc_info:
        client.system_info()
    assert "boom" in str(exc_info.value)


def test_malformed_envelope():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"containers": []})

    client = handler_client(handler)
    with pytest.raises(SerializationError):
        client.list_containers()


def test_missing_data():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": True, "data": None})

    client = handler_client(handler)
    with pytest.raises(SerializationError):
        client.get_container(id="abc")


@pytest.mark.asyncio
async def test_ping_unreachable_runtime():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = handler_client(handler)
    assert (await client.aping()).result is False
    assert client.ping().result is False


def test_default_provider_is_bolt():
    runtime = FakeRuntime()
    client = RuntimeClient(
        __provider__=dict(
            type="default",
            parameters={
                "endpoint": runtime.endpoint,
                "nparams": {"transport": runtime.transport()},
            },
        )
    )
    assert client.ping().result is True
    assert runtime.requests[-1].url.path == "/ping"
