from datetime import datetime, timezone

import pytest

from ghostpanel.core.exceptions import (
    AuthError,
    ConfigError,
    NetworkError,
    NotFoundError,
    SerializationError,
    UnauthorizedError,
)
from ghostpanel.registry import parse_bearer_challenge

from ._fake_registry import (
    FakeRegistry,
    config_digest,
    image,
    layer_digest,
    manifest_digest,
)
from ._sync_and_async_client import RegistrySyncAndAsyncClient, get_client

IMAGES = {
    "games/doom": {
        "latest": image([100, 250], author="id"),
        "1.9": image([10], created="2023-01-01T00:00:00+02:00"),
    },
    "tools/steamcmd": {"stable": image([42], created="not a date")},
}


def make_client(async_call: bool, registry: FakeRegistry, **kwargs):
    return RegistrySyncAndAsyncClient(
        get_client(registry, **kwargs), async_call=async_call
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_authenticate_without_credentials(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    res = await client.authenticate()
    assert res.result is None
    assert registry.requests == []
    assert not client.client.authenticated


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_authenticate_with_bearer_challenge(async_call: bool):
    registry = FakeRegistry(
        "registry.test",
        IMAGES,
        username="alice",
        password="s3cret",
        token="tok-1",
    )
    client = make_client(
        async_call, registry, username="alice", password="s3cret"
    )

    await client.authenticate()
    assert client.client.authenticated

    token_request = registry.requests[-1]
    assert token_request.url.path == "/token"
    assert token_request.url.params["service"] == "registry.test"
    assert token_request.url.params["scope"] == "registry:catalog:*"

    res = await client.list_repositories()
    assert res.result == ["games/doom", "tools/steamcmd"]
    assert registry.requests[-1].headers["authorization"] == "Bearer tok-1"


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_authenticate_registry_without_token(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry, username="u", password="p")

    await client.authenticate()
    assert registry.paths() == ["/v2/"]
    assert not client.client.authenticated


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_authenticate_rejected_credentials(async_call: bool):
    registry = FakeRegistry(
        "registry.test", IMAGES, username="alice", password="s3cret", token="t"
    )
    client = make_client(
        async_call, registry, username="alice", password="wrong"
    )

    with pytest.raises(AuthError):
        await client.authenticate()
    assert not client.client.authenticated


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_authenticate_challenge_without_realm(async_call: bool):
    registry = FakeRegistry(
        "registry.test",
        IMAGES,
        username="u",
        password="p",
        token="t",
        challenge='Bearer service="registry.test"',
    )
    client = make_client(async_call, registry, username="u", password="p")

    with pytest.raises(AuthError):
        await client.authenticate()
    assert "/token" not in registry.paths()


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_expired_token_is_not_refreshed(async_call: bool):
    registry = FakeRegistry(
        "registry.test", IMAGES, username="u", password="p", token="old"
    )
    client = make_client(async_call, registry, username="u", password="p")
    await client.authenticate()

    registry.token = "new"
    with pytest.raises(UnauthorizedError):
        await client.list_repositories()
    assert registry.paths() == ["/v2/", "/token", "/v2/_catalog"]


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_list_tags(async_call: bool):
    registry = FakeRegistry(
        "registry.test", {**IMAGES, "empty/repo": {}}
    )
    client = make_client(async_call, registry)

    res = await client.list_tags(repository="games/doom")
    assert sorted(res.result) == ["1.9", "latest"]

    res = await client.list_tags(repository="empty/repo")
    assert res.result == []

    with pytest.raises(NotFoundError):
        await client.list_tags(repository="missing/repo")


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_get_manifest(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    res = await client.get_manifest(repository="games/doom", tag="latest")
    manifest = res.result
    assert manifest.schema_version == 2
    assert manifest.config.digest == config_digest("games/doom", "latest")
    assert [layer.size for layer in manifest.layers] == [100, 250]
    assert res.native["digest"] == manifest_digest("games/doom", "latest")

    request = registry.requests[-1]
    assert "manifest.v2+json" in request.headers["accept"]


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_get_image_info(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    res = await client.get_image_info(repository="games/doom", tag="latest")
    info = res.result
    assert info.repository == "games/doom"
    assert info.tag == "latest"
    assert info.digest == config_digest("games/doom", "latest")
    assert info.size == 350
    assert info.author == "id"
    assert info.created == datetime(2024, 5, 1, 12, tzinfo=timezone.utc)
    assert [layer.digest for layer in info.layers] == [
        layer_digest("games/doom", "latest", 0),
        layer_digest("games/doom", "latest", 1),
    ]

    res = await client.get_image_info(repository="games/doom", tag="1.9")
    assert res.result.created == datetime(
        2022, 12, 31, 22, tzinfo=timezone.utc
    )


@pytest.mark.parametrize(
    "created,expected",
    [
        ("2024-05-01T12:00:00Z", datetime(2024, 5, 1, 12)),
        ("2024-05-01t12:00:00z", datetime(2024, 5, 1, 12)),
        ("2024-05-01 12:00:00+00:00", datetime(2024, 5, 1, 12)),
        (
            "2024-05-01T12:00:00.250-01:30",
            datetime(2024, 5, 1, 13, 30, 0, 250000),
        ),
    ],
)
def test_get_image_info_rfc3339_created(created, expected):
    registry = FakeRegistry(
        "registry.test", {"a": {"v1": image([1], created=created)}}
    )
    client = get_client(registry)

    res = client.get_image_info(repository="a", tag="v1")
    assert res.result.created == expected.replace(tzinfo=timezone.utc)


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
@pytest.mark.parametrize(
    "created",
    [
        "not a date",
        "2024-05-01",
        "2024-05-01T12:00:00",
        "20240501T120000",
        "20240501T120000Z",
        None,
        1714564800,
    ],
)
async def test_get_image_info_unparseable_created(
    async_call: bool, created
):
    registry = FakeRegistry(
        "registry.test", {"a": {"v1": image([1], created=created)}}
    )
    client = make_client(async_call, registry)

    before = datetime.now(timezone.utc)
    res = await client.get_image_info(repository="a", tag="v1")
    after = datetime.now(timezone.utc)
    assert before <= res.result.created <= after
    assert res.result.author is None


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_get_blob_not_json(async_call: bool):
    digest = layer_digest("games/doom", "latest", 0)
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    with pytest.raises(SerializationError):
        await client.get_blob(repository="games/doom", digest=digest)


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_pull_image(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    res = await client.pull_image(repository="games/doom", tag="latest")
    assert res.result is None
    heads = registry.paths("HEAD")
    assert heads == [
        f"/v2/games/doom/blobs/{layer_digest('games/doom', 'latest', i)}"
        for i in range(2)
    ]


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_pull_image_missing_layer(async_call: bool):
    missing = layer_digest("games/doom", "latest", 1)
    registry = FakeRegistry(
        "registry.test", IMAGES, missing_blobs=(missing,)
    )
    client = make_client(async_call, registry)

    with pytest.raises(NotFoundError) as exc_info:
        await client.pull_image(repository="games/doom", tag="latest")
    assert missing in str(exc_info.value)


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_push_image_not_implemented(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    with pytest.raises(ConfigError):
        await client.push_image(repository="games/doom", tag="latest")
    assert registry.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_delete_image(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES)
    client = make_client(async_call, registry)

    res = await client.delete_image(repository="games/doom", tag="latest")
    digest = manifest_digest("games/doom", "latest")
    assert res.result == digest
    assert registry.deleted == [f"games/doom@{digest}"]


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_delete_image_without_digest(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES, digest_header=False)
    client = make_client(async_call, registry)

    with pytest.raises(NetworkError):
        await client.delete_image(repository="games/doom", tag="latest")
    assert registry.paths("DELETE") == []
    assert registry.deleted == []


@pytest.mark.asyncio
@pytest.mark.parametrize("async_call", [False, True])
async def test_unreachable_registry(async_call: bool):
    registry = FakeRegistry("registry.test", IMAGES, down=True)
    client = make_client(async_call, registry)

    with pytest.raises(NetworkError):
        await client.list_repositories()


def test_view_never_exposes_password():
    registry = FakeRegistry("registry.test")
    client = get_client(registry, username="alice", password="s3cret")

    view = client.view()
    assert view.has_auth
    assert "s3cret" not in view.to_json()
    assert "s3cret" not in repr(client.config)


def test_config_url_trailing_slash():
    client = get_client(FakeRegistry("registry.test"))
    assert client.config.url == "https://registry.test"


@pytest.mark.parametrize(
    "header,realm,service,scope",
    [
        (
            'Bearer realm="https://auth.docker.io/token",'
            'service="registry.docker.io"',
            "https://auth.docker.io/token",
            "registry.docker.io",
            None,
        ),
        (
            'bearer realm="https://r/token", service="r", '
            'scope="repository:games/doom:pull"',
            "https://r/token",
            "r",
            "repository:games/doom:pull",
        ),
    ],
)
def test_parse_bearer_challenge(header, realm, service, scope):
    challenge = parse_bearer_challenge(header)
    assert challenge.realm == realm
    assert challenge.service == service
    assert challenge.scope == scope


@pytest.mark.parametrize(
    "header",
    [
        None,
        "",
        'Basic realm="registry"',
        'Bearer service="registry.test"',
        'Bearer realm="https://r/token"',
    ],
)
def test_parse_bearer_challenge_invalid(header):
    with pytest.raises(AuthError):
        parse_bearer_challenge(header)
