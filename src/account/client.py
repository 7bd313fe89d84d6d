"""Session client for a massive.com account."""

import threading

from src.account.api import fetch_account_record
from src.account.auth import authenticate
from src.account.errors import require
from src.account.keys import fetch_key_details, fetch_keys
from src.account.models import (
    AccountInfo,
    AssetConfig,
    CredentialSet,
    RawKeyDetail,
    RawKeySummary,
    RestRateLimit,
    asset_class_key,
)
from src.account.normalizer import normalize
from src.account.selector import primary_credential_set
from src.logging.structured import get_logger
from src.transport.base import Transport
from src.transport.http import HttpxTransport

logger = get_logger("client")


class MassiveAccountClient:
    """Account metadata and API credentials for one signed-in session.

    `account_info()` is fetched on first use and cached for the life of the
    instance; create a new client to refresh it. All other accessors read
    from that cached value.
    """

    def __init__(self, account_id: str, token: str, *, transport: Transport | None = None):
        self.account_id = require(account_id, "account_id")
        self.token = require(token, "token")
        self._transport = transport or HttpxTransport()
        self._account_info: AccountInfo | None = None
        self._account_info_lock = threading.Lock()

    @classmethod
    def sign_in(
        cls, email: str, password: str, *, transport: Transport | None = None
    ) -> "MassiveAccountClient | None":
        """Authenticate with the dashboard. None if sign-in fails."""
        require(email, "email")
        require(password, "password")

        transport = transport or HttpxTransport()
        credentials = authenticate(email, password, transport)
        if credentials is None:
            return None
        return cls(credentials.account_id, credentials.token, transport=transport)

    def keys(self) -> list[RawKeySummary]:
        return fetch_keys(self.account_id, self.token, self._transport)

    def key_details(self, key_id: str) -> RawKeyDetail | None:
        return fetch_key_details(self.account_id, key_id, self.token, self._transport)

    def _detail_for(self, key_id: str | None) -> RawKeyDetail | None:
        # Rows recovered by the bare-key fallback have no id to look up
        if not key_id:
            return None
        return self.key_details(key_id)

    def _load_account_info(self) -> AccountInfo:
        record = fetch_account_record(self.account_id, self.token, self._transport)
        if record is None:
            logger.info("Account API unavailable, continuing with scraped keys only")

        # One page fetch per key, sequentially, in dashboard order
        return normalize(self.account_id, record, self.keys(), self._detail_for)

    def account_info(self) -> AccountInfo:
        """Complete account information; see AccountInfo.to_dict() for the compact form."""
        if self._account_info is None:
            with self._account_info_lock:
                if self._account_info is None:
                    self._account_info = self._load_account_info()
        return self._account_info

    def asset_classes(self) -> tuple[str, ...]:
        return self.account_info().asset_classes

    def _asset(self, asset_class) -> AssetConfig | None:
        return self.account_info().assets.get(asset_class_key(asset_class))

    def rest_rate_limit(self, asset_class) -> RestRateLimit | None:
        """REST limit for `asset_class`, or None if the account has no such class."""
        asset = self._asset(asset_class)
        return asset.rest_rate_limit if asset else None

    def rest_rate_limits(self) -> dict[str, RestRateLimit]:
        return {name: asset.rest_rate_limit for name, asset in self.account_info().assets.items()}

    def websocket_connection_limit(self, asset_class) -> int:
        """Concurrent WebSocket connections allowed; 0 if unavailable or unknown."""
        asset = self._asset(asset_class)
        return asset.websocket_connection_limit if asset else 0

    def primary_credential_set(self) -> CredentialSet | None:
        return primary_credential_set(self.account_info().credential_sets)

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
