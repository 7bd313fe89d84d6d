"""Account, asset and credential models.

Fields the upstream sources did not provide are None on the dataclasses and
absent from `to_dict()` output, so key absence means "unknown" rather than an
explicit null.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from types import MappingProxyType
from typing import Any

# Rate limit assumed when an asset class has no entry in rate_limit_by_asset_type
UNLIMITED_REQUESTS = 99
UNLIMITED_WINDOW_SECONDS = 1
# Listed limits are per minute
LISTED_WINDOW_SECONDS = 60


def asset_class_key(value: Any) -> str:
    """Canonical asset class identifier: stripped, lowercase string.

    Accepts plain strings and Enum members (their value is used).
    """
    raw = getattr(value, "value", value)
    return str(raw).strip().lower()


def _compact(obj: Any) -> Any:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if isinstance(obj, Mapping):
        return {k: _compact(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple)):
        return [_compact(v) for v in obj]
    return obj


def _compact_fields(obj: Any) -> dict:
    result = {}
    for f in fields(obj):
        value = getattr(obj, f.name)
        if value is None:
            continue
        result[f.name] = _compact(value)
    return result


@dataclass(frozen=True)
class RestRateLimit:
    requests: int
    window: int  # seconds

    def to_dict(self) -> dict:
        return {"requests": self.requests, "window": self.window}


@dataclass(frozen=True)
class AssetConfig:
    websocket_connection_limit: int
    rest_rate_limit: RestRateLimit

    def to_dict(self) -> dict:
        return {
            "websocket_connection_limit": self.websocket_connection_limit,
            "rest_rate_limit": self.rest_rate_limit.to_dict(),
        }


@dataclass
class RawKeySummary:
    """One row of the keys table. Any field may be missing on a partial scrape."""

    id: str | None = None
    name: str | None = None
    key: str | None = None
    created_at: str | None = None


@dataclass
class RawKeyDetail:
    """Fields scraped from a single key's page; None where the marker was not found."""

    name: str | None = None
    id: str | None = None
    api_key: str | None = None
    s3_access_key_id: str | None = None
    s3_secret_access_key: str | None = None
    s3_endpoint: str | None = None
    s3_bucket: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))


@dataclass(frozen=True)
class S3Credentials:
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint: str | None = None
    bucket: str | None = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_dict(self) -> dict:
        return _compact_fields(self)


@dataclass(frozen=True)
class CredentialSet:
    id: str | None = None
    name: str | None = None
    api_key: str | None = None
    created_at: str | None = None
    s3: S3Credentials | None = None

    def to_dict(self) -> dict:
        return _compact_fields(self)


@dataclass(frozen=True)
class AccountInfo:
    account_id: str
    email: str | None = None
    subscription_id: str | None = None
    provider: str | None = None
    billing_interval: str | None = None
    account_type: str | None = None
    email_verified: bool | None = None
    created_utc: str | None = None
    updated_utc: str | None = None
    payment_id: str | None = None
    asset_classes: tuple[str, ...] = ()
    assets: Mapping[str, AssetConfig] = field(default_factory=dict)
    credential_sets: tuple[CredentialSet, ...] = ()

    def __post_init__(self):
        # The memoized instance is shared by every caller of account_info()
        object.__setattr__(self, "assets", MappingProxyType(dict(self.assets)))

    def to_dict(self) -> dict:
        return _compact_fields(self)


@dataclass(frozen=True)
class SessionCredentials:
    """Account id + session token recovered from the dashboard login cookies."""

    account_id: str
    token: str
