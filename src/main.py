"""massive-account entry points.

Usage:
    from src.main import info

    account = info()  # MASSIVE_ACCOUNT_EMAIL / MASSIVE_ACCOUNT_PASSWORD
    account.to_dict()["credential_sets"]
"""

from src.account.client import MassiveAccountClient
from src.account.errors import AuthenticationError, InvalidInputError
from src.account.models import AccountInfo
from src.config.settings import get_settings
from src.logging.structured import get_logger, setup_logging


def sign_in(email: str, password: str) -> MassiveAccountClient | None:
    """Authenticate and create a client. None if authentication fails."""
    setup_logging()
    return MassiveAccountClient.sign_in(email, password)


def new_client(account_id: str, token: str) -> MassiveAccountClient:
    """Create a client from an existing session."""
    setup_logging()
    return MassiveAccountClient(account_id, token)


def info(email: str | None = None, password: str | None = None) -> AccountInfo:
    """Sign in and return the complete account information.

    Credentials default to the MASSIVE_ACCOUNT_EMAIL and
    MASSIVE_ACCOUNT_PASSWORD settings.
    """
    setup_logging()
    settings = get_settings()
    email = email or settings.massive_account_email
    password = password or settings.massive_account_password
    if not email:
        raise InvalidInputError("email", "email required (via argument or MASSIVE_ACCOUNT_EMAIL)")
    if not password:
        raise InvalidInputError(
            "password", "password required (via argument or MASSIVE_ACCOUNT_PASSWORD)"
        )

    client = sign_in(email, password)
    if client is None:
        get_logger().warning("Authentication failed")
        raise AuthenticationError("Authentication failed")

    with client:
        return client.account_info()
