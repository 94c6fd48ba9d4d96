import asyncio

import pytest

from bistro.core.security import TokenService
from bistro.middleware.rbac import (
    ADMIN_ONLY,
    GuardPipeline,
    RequestContext,
    authenticate,
    authorize,
)
from bistro.models import Role


def test_missing_authorization_header_is_unauthorized(client):
    response = client.get("/users")

    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_wrong_signature_is_forbidden(client):
    forged = TokenService("another-secret").issue({"email": "admin@bistro.com"})

    response = client.get("/users", headers={"Authorization": f"Bearer {forged}"})

    assert response.status_code == 403


def test_non_bearer_scheme_is_forbidden(client, tokens):
    token = tokens.issue({"email": "guest@bistro.com"})

    response = client.get("/carts", headers={"Authorization": f"Basic {token}"})

    assert response.status_code == 403


def test_non_admin_is_forbidden(client, auth_headers, customer_email):
    response = client.get("/users", headers=auth_headers(customer_email))

    assert response.status_code == 403
    assert response.json()["error"] == "forbidden"


def test_unknown_user_is_forbidden(client, auth_headers):
    response = client.get("/admin-stats", headers=auth_headers("nobody@bistro.com"))

    assert response.status_code == 403


def test_admin_is_allowed(client, auth_headers, admin_email, customer_email):
    response = client.get("/users", headers=auth_headers(admin_email))

    assert response.status_code == 200
    assert {u["email"] for u in response.json()} == {admin_email, customer_email}


def test_role_is_read_on_every_request(client, store, auth_headers, admin_email):
    headers = auth_headers(admin_email)
    assert client.get("/users", headers=headers).status_code == 200

    store.users.docs[0]["role"] = "none"

    assert client.get("/users", headers=headers).status_code == 403


def test_pipeline_reports_first_denial(store, tokens):
    context = RequestContext(authorization=None, store=store, tokens=tokens)

    decision = asyncio.run(ADMIN_ONLY.evaluate(context))

    assert not decision.allowed
    assert decision.reason == "missing_credentials"
    assert decision.status_code == 401


def test_pipeline_attaches_claim(store, tokens, admin_email):
    token = tokens.issue({"email": admin_email})
    context = RequestContext(authorization=f"Bearer {token}", store=store, tokens=tokens)

    decision = asyncio.run(GuardPipeline(authenticate, authorize(Role.ADMIN)).evaluate(context))

    assert decision.allowed
    assert context.email == admin_email


def test_authorize_without_authenticate_is_a_programming_error(store, tokens):
    context = RequestContext(authorization=None, store=store, tokens=tokens)

    with pytest.raises(RuntimeError):
        asyncio.run(GuardPipeline(authorize(Role.ADMIN)).evaluate(context))
