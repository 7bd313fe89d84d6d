"""Dashboard sign-in.

The login form is a server action: its id is baked into the login page's
JS chunk, so it is discovered on every sign-in before posting the form.
A successful POST sets two cookies:

- massive-account: URL-encoded (twice) base64 of `{"id": "<account uuid>", ...}`
- massive-token: the session token
"""

import base64
import binascii
import json
import re
from urllib.parse import unquote

from src.account.models import SessionCredentials
from src.config.settings import get_settings
from src.logging.structured import get_logger
from src.transport.base import HTTPResponse, Transport

LOGIN_PATH = "/dashboard/login"

_LOGIN_CHUNK_PATTERN = re.compile(
    r"static/chunks/app/\(authentication\)/\(unprotected\)/login/page-[^\"]+\.js"
)
# Minified as (0,i.createServerReference)("<id>",...) or createServerReference("<id>",...)
_ACTION_ID_PATTERN = re.compile(r'createServerReference\)?\("([0-9a-f]{40,})"')
_ACCOUNT_COOKIE_PATTERN = re.compile(r"massive-account=([^;]+)")
_TOKEN_COOKIE_PATTERN = re.compile(r"massive-token=([^;]+)")

# Initial useActionState value the login form submits as field "0"
_INITIAL_FORM_STATE = json.dumps(
    [{"isError": False, "message": "", "errors": None}, "$K1"], separators=(",", ":")
)

logger = get_logger("auth")


def fetch_login_action_id(transport: Transport) -> str | None:
    """Discover the login server action id from the login page's JS chunk."""
    origin = get_settings().dashboard_origin

    page = transport.get(f"{origin}{LOGIN_PATH}")
    if page is None or page.status_code != 200:
        logger.warning("Login page unavailable")
        return None

    chunk_match = _LOGIN_CHUNK_PATTERN.search(page.text)
    if not chunk_match:
        logger.warning("Login page chunk not found")
        return None

    script = transport.get(f"{origin}/dashboard/_next/{chunk_match.group(0)}")
    if script is None or script.status_code != 200:
        logger.warning("Login page chunk unavailable")
        return None

    action_match = _ACTION_ID_PATTERN.search(script.text)
    if not action_match:
        logger.warning("Login server action id not found")
        return None

    return action_match.group(1)


def perform_login(
    email: str, password: str, action_id: str, transport: Transport
) -> HTTPResponse | None:
    origin = get_settings().dashboard_origin
    fields = [
        ("1_email", email),
        ("1_password", password),
        ("0", _INITIAL_FORM_STATE),
    ]
    headers = {
        "Accept": "text/x-component",
        "Origin": origin,
        "Referer": f"{origin}{LOGIN_PATH}",
        "Next-Action": action_id,
    }
    return transport.post(f"{origin}{LOGIN_PATH}", fields=fields, headers=headers)


def _decode_account_id(cookie_value: str) -> str | None:
    try:
        encoded = unquote(unquote(cookie_value))
        # The dashboard may drop base64 padding
        decoded = base64.b64decode(encoded + "=" * (-len(encoded) % 4))
        account = json.loads(decoded)
    except (binascii.Error, ValueError):
        return None
    if not isinstance(account, dict):
        return None
    return account.get("id")


def extract_credentials_from_cookies(response: HTTPResponse) -> SessionCredentials | None:
    """Read the account id and session token from the login response cookies."""
    if not 200 <= response.status_code <= 399:
        return None

    account_id = None
    token = None
    for cookie in response.set_cookies:
        account_match = _ACCOUNT_COOKIE_PATTERN.search(cookie)
        if account_match and account_id is None:
            account_id = _decode_account_id(account_match.group(1))
        token_match = _TOKEN_COOKIE_PATTERN.search(cookie)
        if token_match and token is None:
            token = token_match.group(1)

    if not account_id or not token:
        return None
    return SessionCredentials(account_id=account_id, token=token)


def authenticate(email: str, password: str, transport: Transport) -> SessionCredentials | None:
    """Sign in to the dashboard. None when any step of the handshake fails."""
    action_id = fetch_login_action_id(transport)
    if action_id is None:
        return None

    response = perform_login(email, password, action_id, transport)
    if response is None:
        return None

    credentials = extract_credentials_from_cookies(response)
    if credentials is None:
        logger.warning(
            "Sign-in did not return session cookies",
            extra={"event_data": {"status_code": response.status_code}},
        )
    return credentials
