"""Dashboard keys pages: session cookie, page fetches and parsing."""

import base64
import json

from src.account.errors import require
from src.account.models import RawKeyDetail, RawKeySummary
from src.config.settings import get_settings
from src.logging.structured import get_logger
from src.scraping.keys import parse_key_detail, parse_key_summaries
from src.scraping.payload import extract_payload
from src.transport.base import Transport

KEYS_PATH = "/dashboard/keys"

logger = get_logger("keys")


def build_session_cookie(account_id: str, token: str) -> str:
    """Cookie header the dashboard expects for an authenticated session.

    massive-account holds base64 of the compact JSON `{"id": account_id}`.
    """
    account_json = json.dumps({"id": account_id}, separators=(",", ":"))
    encoded = base64.b64encode(account_json.encode("utf-8")).decode("ascii")
    return f"massive-account={encoded}; massive-token={token}"


def _fetch_page(path: str, cookie: str, transport: Transport) -> str | None:
    url = f"{get_settings().dashboard_origin}{path}"
    response = transport.get(url, headers={"Cookie": cookie})
    if response is None:
        return None
    if response.status_code != 200:
        logger.warning(
            "Dashboard page unavailable",
            extra={"event_data": {"path": path, "status_code": response.status_code}},
        )
        return None
    return response.text


def fetch_keys_page(cookie: str, transport: Transport) -> str | None:
    return _fetch_page(KEYS_PATH, cookie, transport)


def fetch_key_detail_page(cookie: str, key_id: str, transport: Transport) -> str | None:
    return _fetch_page(f"{KEYS_PATH}/{key_id}", cookie, transport)


def fetch_keys(account_id: str, token: str, transport: Transport) -> list[RawKeySummary]:
    """List the account's API keys in dashboard order. Empty on any failure."""
    require(account_id, "account_id")
    require(token, "token", "token is required for API keys access")

    html = fetch_keys_page(build_session_cookie(account_id, token), transport)
    if html is None:
        return []

    summaries = parse_key_summaries(extract_payload(html))
    logger.debug("Parsed keys page", extra={"event_data": {"key_count": len(summaries)}})
    return summaries


def fetch_key_details(
    account_id: str, key_id: str, token: str, transport: Transport
) -> RawKeyDetail | None:
    """Scrape one key's page, including its S3 credentials. None if the page is unavailable."""
    require(account_id, "account_id")
    require(key_id, "key_id")
    require(token, "token")

    html = fetch_key_detail_page(build_session_cookie(account_id, token), key_id, transport)
    if html is None:
        return None

    return parse_key_detail(extract_payload(html))
