"""
Tests for the company-name directory endpoints (/api/v1/company-names).
"""

import pytest

from tests.factories.registration import CompanyNameFactory, PreRegistrationFactory

PREFIX = "/api/v1/company-names"


async def create_entry(client, headers, **overrides):
    response = await client.post(PREFIX, json=CompanyNameFactory(**overrides), headers=headers)
    assert response.status_code == 201
    return response.json()


class TestDirectory:
    @pytest.mark.asyncio
    async def test_create_assigns_code(self, client, admin_headers):
        entry = await create_entry(client, admin_headers, name="Acme")

        assert entry["name"] == "Acme"
        assert len(entry["code"]) == 4
        assert entry["code"].isdigit()

    @pytest.mark.asyncio
    async def test_create_requires_admin(self, client, user_headers):
        response = await client.post(PREFIX, json=CompanyNameFactory(), headers=user_headers)

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_duplicate_name(self, client, admin_headers):
        await create_entry(client, admin_headers, name="Acme")

        response = await client.post(
            PREFIX, json=CompanyNameFactory(name="Acme"), headers=admin_headers
        )

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_public_list_sorted_by_name(self, client, admin_headers):
        await create_entry(client, admin_headers, name="Zeta")
        await create_entry(client, admin_headers, name="Alpha")

        response = await client.get(f"{PREFIX}/public")

        assert [e["name"] for e in response.json()] == ["Alpha", "Zeta"]

    @pytest.mark.asyncio
    async def test_lookup_by_code(self, client, admin_headers):
        entry = await create_entry(client, admin_headers, name="Acme")

        found = await client.get(f"{PREFIX}/code/{entry['code']}")
        missing = await client.get(f"{PREFIX}/code/0000")

        assert found.json()["id"] == entry["id"]
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_update_code(self, client, admin_headers):
        entry = await create_entry(client, admin_headers)
        new_code = "1000" if entry["code"] != "1000" else "1001"

        response = await client.put(
            f"{PREFIX}/{entry['id']}", json={"code": new_code}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["code"] == new_code

    @pytest.mark.asyncio
    async def test_update_rejects_malformed_code(self, client, admin_headers):
        entry = await create_entry(client, admin_headers)

        response = await client.put(
            f"{PREFIX}/{entry['id']}", json={"code": "12x4"}, headers=admin_headers
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_rejects_taken_code(self, client, admin_headers):
        first = await create_entry(client, admin_headers)
        second = await create_entry(client, admin_headers)

        response = await client.put(
            f"{PREFIX}/{second['id']}", json={"code": first["code"]}, headers=admin_headers
        )

        assert response.status_code == 409
        assert response.json()["code"] == "REG_002"

    @pytest.mark.asyncio
    async def test_unregistered(self, client, admin_headers, registration_open):
        taken = await create_entry(client, admin_headers, name="Acme")
        await create_entry(client, admin_headers, name="Beta")
        await client.post(
            "/api/v1/pre-register",
            json=PreRegistrationFactory(company_name="Acme", code=taken["code"]),
        )

        response = await client.get(f"{PREFIX}/unregistered", headers=admin_headers)

        assert response.status_code == 200
        entries = response.json()
        assert [e["name"] for e in entries] == ["Beta"]
        assert entries[0]["is_registered"] is False

    @pytest.mark.asyncio
    async def test_delete_one_and_all(self, client, admin_headers):
        first = await create_entry(client, admin_headers)
        await create_entry(client, admin_headers)
        await create_entry(client, admin_headers)

        deleted = await client.delete(f"{PREFIX}/{first['id']}", headers=admin_headers)
        assert deleted.status_code == 200
        assert (await client.get(f"{PREFIX}/{first['id']}", headers=admin_headers)).status_code == 404

        response = await client.delete(f"{PREFIX}/all", headers=admin_headers)

        assert response.json()["deleted_count"] == 2
        assert (await client.get(PREFIX, headers=admin_headers)).json() == []


class TestImport:
    @pytest.mark.asyncio
    async def test_import_objects_and_strings(self, client, admin_headers):
        await create_entry(client, admin_headers, name="Existing")

        response = await client.post(
            f"{PREFIX}/import",
            json={
                "companies": [
                    {"name": "Fresh", "code": "4321", "contact_name": "Dana"},
                    "Plain Name",
                    {"name": ""},
                    {"name": "Existing"},
                ]
            },
            headers=admin_headers,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["total_rows"] == 4
        assert result["imported"] == 2
        assert result["skipped"] == 1
        assert result["errors"] == 1
        assert result["error_details"][0]["error"] == "Empty name"

    @pytest.mark.asyncio
    async def test_import_legacy_names(self, client, admin_headers):
        response = await client.post(
            f"{PREFIX}/import", json={"names": ["One", "Two"]}, headers=admin_headers
        )

        assert response.json()["imported"] == 2

    @pytest.mark.asyncio
    async def test_import_requires_list(self, client, admin_headers):
        response = await client.post(f"{PREFIX}/import", json={}, headers=admin_headers)

        assert response.status_code == 422
