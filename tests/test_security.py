from datetime import timedelta

import jwt
import pytest

from bistro.core.exceptions import AuthError
from bistro.core.security import TokenService


def test_verify_returns_issued_claim(tokens):
    claim = {"email": "guest@bistro.com", "name": "Guest"}

    token = tokens.issue(claim)

    assert tokens.verify(token) == claim


def test_issue_sets_one_hour_expiry(tokens):
    token = tokens.issue({"email": "guest@bistro.com"})

    payload = jwt.decode(token, options={"verify_signature": False})

    assert payload["exp"] - payload["iat"] == 3600


def test_expired_token_is_rejected(tokens):
    token = tokens.issue({"email": "guest@bistro.com"}, expires_delta=timedelta(seconds=-1))

    with pytest.raises(AuthError):
        tokens.verify(token)


def test_token_signed_with_other_secret_is_rejected(tokens):
    forged = TokenService("another-secret").issue({"email": "guest@bistro.com"})

    with pytest.raises(AuthError):
        tokens.verify(forged)


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_malformed_token_is_rejected(tokens, token):
    with pytest.raises(AuthError):
        tokens.verify(token)
