"""Tests for src/account/auth.py: dashboard sign-in handshake."""

import base64
import json
from urllib.parse import quote

import pytest

from src.account.auth import (
    authenticate,
    extract_credentials_from_cookies,
    fetch_login_action_id,
)
from tests.conftest import DASHBOARD, FakeTransport, ok

ACTION_ID = "7f" + "0123456789abcdef" * 3
CHUNK_PATH = "static/chunks/app/(authentication)/(unprotected)/login/page-3f2a9c.js"
LOGIN_URL = f"{DASHBOARD}/dashboard/login"
CHUNK_URL = f"{DASHBOARD}/dashboard/_next/{CHUNK_PATH}"


def account_cookie(account_id: str) -> str:
    encoded = base64.b64encode(json.dumps({"id": account_id, "email": "a@b.c"}).encode()).decode()
    return f"massive-account={quote(quote(encoded, safe=''), safe='')}; Path=/; HttpOnly"


@pytest.fixture
def login_routes() -> dict:
    return {
        LOGIN_URL: ok(f'<script src="/dashboard/_next/{CHUNK_PATH}"></script>'),
        CHUNK_URL: ok(f'(0,s.createServerReference)("{ACTION_ID}",s.callServer,void 0)'),
    }


class TestFetchLoginActionId:

    def test_discovers_action_id(self, login_routes):
        transport = FakeTransport(login_routes)
        assert fetch_login_action_id(transport) == ACTION_ID
        assert transport.urls() == [LOGIN_URL, CHUNK_URL]

    def test_unminified_reference(self, login_routes):
        login_routes[CHUNK_URL] = ok(f'createServerReference("{ACTION_ID}", callServer)')
        assert fetch_login_action_id(FakeTransport(login_routes)) == ACTION_ID

    def test_login_page_unavailable(self):
        assert fetch_login_action_id(FakeTransport({LOGIN_URL: ok("", status_code=503)})) is None

    def test_chunk_not_referenced(self, login_routes):
        login_routes[LOGIN_URL] = ok("<html>no scripts</html>")
        transport = FakeTransport(login_routes)
        assert fetch_login_action_id(transport) is None
        assert transport.urls() == [LOGIN_URL]

    def test_short_action_id_rejected(self, login_routes):
        login_routes[CHUNK_URL] = ok('createServerReference)("abc123",x)')
        assert fetch_login_action_id(FakeTransport(login_routes)) is None


class TestExtractCredentialsFromCookies:

    def test_reads_account_id_and_token(self):
        response = ok(status_code=303, set_cookies=[
            account_cookie("acct-uuid"),
            "massive-token=tok-xyz; Path=/; Secure",
        ])
        credentials = extract_credentials_from_cookies(response)
        assert credentials.account_id == "acct-uuid"
        assert credentials.token == "tok-xyz"

    def test_unpadded_account_cookie(self):
        encoded = base64.b64encode(json.dumps({"id": "acct-7"}).encode()).decode()
        assert encoded.endswith("=")
        response = ok(set_cookies=[
            f"massive-account={encoded.rstrip('=')}; Path=/",
            "massive-token=tok",
        ])
        assert extract_credentials_from_cookies(response).account_id == "acct-7"

    def test_missing_token(self):
        response = ok(set_cookies=[account_cookie("acct-uuid")])
        assert extract_credentials_from_cookies(response) is None

    def test_no_cookies(self):
        assert extract_credentials_from_cookies(ok()) is None

    def test_error_status(self):
        response = ok(status_code=401, set_cookies=[account_cookie("a"), "massive-token=t"])
        assert extract_credentials_from_cookies(response) is None

    def test_undecodable_account_cookie(self):
        response = ok(set_cookies=["massive-account=%%%not-base64", "massive-token=t"])
        assert extract_credentials_from_cookies(response) is None


class TestAuthenticate:

    def test_full_handshake(self, login_routes):
        transport = FakeTransport(login_routes)
        # The login URL answers both the GET and the form POST
        login_page = login_routes[LOGIN_URL]
        login_page.set_cookies = [account_cookie("acct-uuid"), "massive-token=tok-xyz"]

        credentials = authenticate("user@example.com", "s3cret", transport)

        assert credentials.account_id == "acct-uuid"
        assert credentials.token == "tok-xyz"

        method, url, headers = transport.requests[-1]
        assert (method, url) == ("POST", LOGIN_URL)
        assert headers["Next-Action"] == ACTION_ID
        assert headers["Accept"] == "text/x-component"
        assert headers["Referer"] == LOGIN_URL

        fields = dict(transport.posted_fields[0])
        assert fields["1_email"] == "user@example.com"
        assert fields["1_password"] == "s3cret"
        assert json.loads(fields["0"]) == [{"isError": False, "message": "", "errors": None}, "$K1"]

    def test_no_action_id_skips_post(self):
        transport = FakeTransport()
        assert authenticate("user@example.com", "pw", transport) is None
        assert all(method == "GET" for method, _, _ in transport.requests)

    def test_rejected_credentials(self, login_routes):
        transport = FakeTransport(login_routes)
        assert authenticate("user@example.com", "wrong", transport) is None
