"""accountservices REST API fetch.

Structured account data (subscription, billing, per-asset limits) comes
from api.polygon.io, authenticated with the dashboard session token as the
`polygon-token` cookie. Any failure returns None so the caller can still
build an account from the scraped keys.
"""

import json
from typing import Any

from src.account.errors import require
from src.account.models import asset_class_key
from src.account.normalizer import RATE_LIMITS_FIELD, WEBSOCKET_LIMITS_FIELD
from src.config.settings import get_settings
from src.logging.structured import get_logger
from src.transport.base import Transport

ACCOUNTS_PATH = "/accountservices/v1/accounts"

logger = get_logger("api")


def normalize_keys(obj: Any) -> Any:
    """Recursively turn mapping keys into stripped strings (inside lists too)."""
    if isinstance(obj, dict):
        return {str(k).strip(): normalize_keys(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [normalize_keys(v) for v in obj]
    return obj


def _canonicalize_asset_maps(record: dict) -> dict:
    for field_name in (WEBSOCKET_LIMITS_FIELD, RATE_LIMITS_FIELD):
        limits = record.get(field_name)
        if isinstance(limits, dict):
            record[field_name] = {asset_class_key(k): v for k, v in limits.items()}
    return record


def fetch_account_record(account_id: str, token: str, transport: Transport) -> dict | None:
    """Fetch the accountservices record whose id matches `account_id`.

    Returns None on transport failure, a non-2xx status, malformed JSON, or
    when no result matches.
    """
    require(account_id, "account_id")
    require(token, "token")

    settings = get_settings()
    url = f"{settings.api_base_url.rstrip('/')}{ACCOUNTS_PATH}"
    response = transport.get(url, headers={"Cookie": f"polygon-token={token}"})
    if response is None:
        return None
    if not response.ok:
        logger.warning(
            "Account API returned an error status",
            extra={"event_data": {"status_code": response.status_code}},
        )
        return None

    try:
        data = json.loads(response.text)
    except json.JSONDecodeError:
        logger.warning("Account API returned malformed JSON")
        return None

    results = data.get("results") if isinstance(data, dict) else None
    if not results or not isinstance(results, list):
        logger.debug("Account API returned no results")
        return None

    account = next(
        (a for a in results if isinstance(a, dict) and a.get("id") == account_id),
        None,
    )
    if account is None:
        logger.warning("Account API results do not include the signed-in account")
        return None

    return _canonicalize_asset_maps(normalize_keys(account))
