"""Merge the accountservices record and the scraped keys into one AccountInfo.

Asset classes are the union of the two limit maps in the API record. Their
REST limits follow what the provider's dashboard shows in practice rather
than anything documented:

- listed in rate_limit_by_asset_type: that many requests per minute
- not listed: effectively unlimited, reported as 99 requests per second
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from src.account.models import (
    LISTED_WINDOW_SECONDS,
    UNLIMITED_REQUESTS,
    UNLIMITED_WINDOW_SECONDS,
    AccountInfo,
    AssetConfig,
    CredentialSet,
    RawKeyDetail,
    RawKeySummary,
    RestRateLimit,
    S3Credentials,
    asset_class_key,
)

WEBSOCKET_LIMITS_FIELD = "max_websocket_connections_by_asset_type"
RATE_LIMITS_FIELD = "rate_limit_by_asset_type"

# Passed through from the API record as-is
IDENTITY_FIELDS = (
    "email",
    "subscription_id",
    "provider",
    "billing_interval",
    "account_type",
    "email_verified",
    "created_utc",
    "updated_utc",
    "payment_id",
)

DetailLookup = Callable[[str | None], RawKeyDetail | None]


def _limits_map(raw: Mapping[str, Any], field_name: str) -> dict[str, int]:
    limits = raw.get(field_name) or {}
    if not isinstance(limits, Mapping):
        return {}
    return {asset_class_key(k): v for k, v in limits.items()}


def derive_asset_classes(
    websocket_limits: Mapping[str, int], rate_limits: Mapping[str, int]
) -> tuple[str, ...]:
    """Sorted, duplicate-free union of both maps' asset classes."""
    return tuple(sorted(set(websocket_limits) | set(rate_limits)))


def derive_asset_config(
    asset_class: str,
    websocket_limits: Mapping[str, int],
    rate_limits: Mapping[str, int],
) -> AssetConfig:
    websocket_limit = websocket_limits.get(asset_class) or 0

    api_limit = rate_limits.get(asset_class)
    if api_limit is not None:
        rest_limit = RestRateLimit(requests=api_limit, window=LISTED_WINDOW_SECONDS)
    else:
        rest_limit = RestRateLimit(requests=UNLIMITED_REQUESTS, window=UNLIMITED_WINDOW_SECONDS)

    return AssetConfig(websocket_connection_limit=websocket_limit, rest_rate_limit=rest_limit)


def build_credential_set(summary: RawKeySummary, detail: RawKeyDetail | None) -> CredentialSet:
    """Combine a keys-table row with its key page. The S3 block is dropped if empty."""
    detail = detail or RawKeyDetail()
    s3 = S3Credentials(
        access_key_id=detail.s3_access_key_id,
        secret_access_key=detail.s3_secret_access_key,
        endpoint=detail.s3_endpoint,
        bucket=detail.s3_bucket,
    )
    return CredentialSet(
        id=summary.id,
        name=summary.name,
        api_key=summary.key,
        created_at=summary.created_at,
        s3=None if s3.is_empty() else s3,
    )


def normalize(
    account_id: str,
    raw: Mapping[str, Any] | None,
    key_summaries: Iterable[RawKeySummary],
    detail_lookup: DetailLookup,
) -> AccountInfo:
    """Build the account model.

    `raw` may be None or empty when the API was unavailable; the result then
    has no asset classes but still lists the scraped credential sets.
    `detail_lookup` is called once per summary, in order.
    """
    raw = raw or {}
    websocket_limits = _limits_map(raw, WEBSOCKET_LIMITS_FIELD)
    rate_limits = _limits_map(raw, RATE_LIMITS_FIELD)

    asset_classes = derive_asset_classes(websocket_limits, rate_limits)
    assets = {
        asset: derive_asset_config(asset, websocket_limits, rate_limits)
        for asset in asset_classes
    }

    credential_sets = tuple(
        build_credential_set(summary, detail_lookup(summary.id))
        for summary in key_summaries
    )

    return AccountInfo(
        account_id=account_id,
        **{name: raw.get(name) for name in IDENTITY_FIELDS},
        asset_classes=asset_classes,
        assets=assets,
        credential_sets=credential_sets,
    )
