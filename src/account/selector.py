"""Primary credential set selection."""

from collections.abc import Sequence

from src.account.models import CredentialSet

DEFAULT_KEY_NAME = "default"


def primary_credential_set(credential_sets: Sequence[CredentialSet]) -> CredentialSet | None:
    """Pick the credential set callers should use by default.

    1. The first set named "Default" (any case).
    2. Otherwise the last set. The dashboard lists keys newest first, so
       this is the oldest key.
    """
    if not credential_sets:
        return None

    for credential_set in credential_sets:
        if credential_set.name and credential_set.name.lower() == DEFAULT_KEY_NAME:
            return credential_set

    return credential_sets[-1]
