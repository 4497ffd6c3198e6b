from __future__ import annotations

from ghostpanel.core import DataModel
from ghostpanel.core.exceptions import AuthError

TOKEN_SCOPE = "registry:catalog:*"


class BearerChallenge(DataModel):
    """Parsed `WWW-Authenticate: Bearer ...` challenge.

    Attributes:
        realm: Token endpoint URL.
        service: Service name to request a token for.
        scope: Scope suggested by the registry, if any.
    """

    realm: str
    service: str
    scope: str | None = None


def parse_bearer_challenge(header: str | None) -> BearerChallenge:
    """Parse a bearer challenge header.

    Parameters are split on commas and their values stripped of quotes.
    Unknown parameters are ignored. Raises `AuthError` when the header is
    missing, is not a Bearer challenge, or lacks `realm` or `service`.
    """
    if not header:
        raise AuthError("Registry returned 401 without a challenge")
    scheme, _, params = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        raise AuthError(f"Unsupported authentication scheme: {scheme}")

    values: dict[str, str] = {}
    for part in params.split(","):
        key, sep, value = part.strip().partition("=")
        if not sep:
            continue
        values[key.strip().lower()] = value.strip().strip('"')

    if not values.get("realm"):
        raise AuthError("Bearer challenge has no realm")
    if not values.get("service"):
        raise AuthError("Bearer challenge has no service")
    return BearerChallenge(
        realm=values["realm"],
        service=values["service"],
        scope=values.get("scope"),
    )
