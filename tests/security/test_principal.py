"""
Tests for bearer-token principals and role checks on the API.
"""

from datetime import timedelta

import pytest
from jose import jwt

from registrar.config import settings
from registrar.security.principal import Principal, Role, create_access_token, decode_principal


class TestPrincipal:
    def test_round_trip(self):
        principal = decode_principal(create_access_token("ops@example.com", Role.ACCOUNTING))

        assert principal == Principal(identity="ops@example.com", role=Role.ACCOUNTING)
        assert principal.is_privileged is True
        assert principal.is_admin is False

    def test_user_is_not_privileged(self):
        principal = decode_principal(create_access_token("someone@example.com"))

        assert principal.role == Role.USER
        assert principal.is_privileged is False

    def test_expired_token(self):
        token = create_access_token("admin@example.com", Role.ADMIN, expires_delta=timedelta(seconds=-5))

        assert decode_principal(token) is None

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "admin@example.com", "role": "admin"}, "not-the-key", algorithm="HS256")

        assert decode_principal(token) is None

    def test_unknown_role(self):
        token = jwt.encode(
            {"sub": "admin@example.com", "role": "superuser"},
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )

        assert decode_principal(token) is None

    def test_missing_subject(self):
        token = jwt.encode({"role": "admin"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

        assert decode_principal(token) is None


class TestRouteGuards:
    @pytest.mark.asyncio
    async def test_invalid_token_on_admin_route(self, client):
        response = await client.get(
            "/api/v1/groups", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    @pytest.mark.asyncio
    async def test_invalid_token_on_public_route_is_anonymous(self, client):
        response = await client.get(
            "/api/v1/companies", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_accounting_bypasses_closed_schedule(self, client, accounting_headers):
        response = await client.post(
            "/api/v1/pre-register",
            json={"name": "Dana", "mobile_number": "0500000000", "company_name": "Acme", "code": "1234"},
            headers=accounting_headers,
        )

        assert response.status_code == 201
