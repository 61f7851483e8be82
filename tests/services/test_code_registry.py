"""Tests for the company-name directory and its codes."""

from unittest.mock import patch

import pytest

from registrar.exceptions import (
    ConflictError,
    DuplicateCodeError,
    NotFoundError,
    RegistryExhaustedError,
    ValidationError,
)
from registrar.models import Company, CompanyName, CompanyStatus, PreRegistration
from registrar.schemas.company_name import (
    CompanyNameCreate,
    CompanyNameImportItem,
    CompanyNameImportRequest,
    CompanyNameUpdate,
)
from registrar.services import code_registry
from registrar.services.code_registry import CodeRegistry


async def add_entry(db, name, code, contact_name="", mobile_number=""):
    entry = CompanyName(name=name, code=code, contact_name=contact_name, mobile_number=mobile_number)
    db.add(entry)
    await db.commit()
    return entry


class TestCodeGeneration:
    @pytest.mark.asyncio
    async def test_generated_code_is_four_digits(self, test_db):
        code = await code_registry.generate_unique_code(test_db)

        assert len(code) == 4
        assert 1000 <= int(code) <= 9999

    @pytest.mark.asyncio
    async def test_generated_code_skips_taken(self, test_db):
        await add_entry(test_db, "Acme", "1234")

        with patch.object(code_registry, "_random_code", side_effect=["1234", "1234", "5678"]):
            code = await code_registry.generate_unique_code(test_db)

        assert code == "5678"

    @pytest.mark.asyncio
    async def test_exhaustion_is_retryable_error(self, test_db):
        await add_entry(test_db, "Acme", "1234")

        with patch.object(code_registry, "_random_code", return_value="1234"):
            with pytest.raises(RegistryExhaustedError) as exc_info:
                await code_registry.generate_unique_code(test_db, max_attempts=5)

        assert exc_info.value.status_code == 503
        assert exc_info.value.headers["Retry-After"] == "1"


class TestValidateCode:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["123", "12345", "12a4", ""])
    async def test_malformed(self, test_db, code):
        with pytest.raises(ValidationError):
            await code_registry.validate_code(test_db, code)

    @pytest.mark.asyncio
    async def test_taken_by_other_entry(self, test_db):
        await add_entry(test_db, "Acme", "1234")

        with pytest.raises(DuplicateCodeError):
            await code_registry.validate_code(test_db, "1234")

    @pytest.mark.asyncio
    async def test_own_code_is_allowed(self, test_db):
        entry = await add_entry(test_db, "Acme", "1234")

        assert await code_registry.validate_code(test_db, " 1234 ", exclude_id=entry.id) == "1234"


class TestLookups:
    @pytest.mark.asyncio
    async def test_lookup_by_name_trims(self, test_db):
        await add_entry(test_db, "Acme", "1234")

        assert (await code_registry.lookup_by_name(test_db, "  Acme ")).code == "1234"
        assert await code_registry.lookup_by_name(test_db, "") is None

    @pytest.mark.asyncio
    async def test_autofill_prefers_registry(self, test_db):
        await add_entry(test_db, "Acme", "1234", contact_name="Dana", mobile_number="0500000001")

        autofill = await code_registry.resolve_autofill(test_db, "1234")

        assert autofill.company_name == "Acme"
        assert autofill.name == "Dana"
        assert autofill.mobile_number == "0500000001"

    @pytest.mark.asyncio
    async def test_autofill_falls_back_to_pre_registration(self, test_db):
        test_db.add(
            PreRegistration(name="Sam", mobile_number="0500000002", company_name="Beta", code="4321")
        )
        await test_db.commit()

        autofill = await code_registry.resolve_autofill(test_db, "4321")

        assert autofill.company_name == "Beta"
        assert autofill.name == "Sam"

    @pytest.mark.asyncio
    async def test_autofill_unknown_code(self, test_db):
        with pytest.raises(NotFoundError):
            await code_registry.resolve_autofill(test_db, "9999")


class TestCodeRegistry:
    @pytest.mark.asyncio
    async def test_create_entry_generates_code(self, test_db):
        entry = await CodeRegistry(test_db).create_entry(
            CompanyNameCreate(name="  Acme  ", contact_name="Dana")
        )

        assert entry.name == "Acme"
        assert code_registry.is_valid_code(entry.code)

    @pytest.mark.asyncio
    async def test_create_duplicate_name(self, test_db):
        await add_entry(test_db, "Acme", "1234")

        with pytest.raises(ConflictError):
            await CodeRegistry(test_db).create_entry(CompanyNameCreate(name="Acme"))

    @pytest.mark.asyncio
    async def test_update_with_empty_code_regenerates(self, test_db):
        entry = await add_entry(test_db, "Acme", "1234")

        with patch.object(code_registry, "_random_code", return_value="7777"):
            updated = await CodeRegistry(test_db).update_entry(entry.id, CompanyNameUpdate(code=""))

        assert updated.code == "7777"

    @pytest.mark.asyncio
    async def test_update_rejects_taken_code(self, test_db):
        await add_entry(test_db, "Acme", "1234")
        other = await add_entry(test_db, "Beta", "5678")

        with pytest.raises(DuplicateCodeError):
            await CodeRegistry(test_db).update_entry(other.id, CompanyNameUpdate(code="1234"))

    @pytest.mark.asyncio
    async def test_update_rejects_taken_name(self, test_db):
        await add_entry(test_db, "Acme", "1234")
        other = await add_entry(test_db, "Beta", "5678")

        with pytest.raises(ConflictError):
            await CodeRegistry(test_db).update_entry(other.id, CompanyNameUpdate(name="Acme"))

    @pytest.mark.asyncio
    async def test_delete_all(self, test_db):
        await add_entry(test_db, "Acme", "1234")
        await add_entry(test_db, "Beta", "5678")

        assert await CodeRegistry(test_db).delete_all() == 2
        assert await CodeRegistry(test_db).list_entries() == []

    @pytest.mark.asyncio
    async def test_list_unregistered(self, test_db):
        await add_entry(test_db, "Acme", "1111")
        await add_entry(test_db, "Beta", "2222")
        await add_entry(test_db, "Gamma", "3333")
        await add_entry(test_db, "Delta", "4444")
        test_db.add(Company(name="Something Else", code="1111", status=CompanyStatus.APPROVED))
        test_db.add(
            PreRegistration(name="Sam", mobile_number="0500000002", company_name=" beta ", code="")
        )
        await test_db.commit()

        names = [entry.name for entry in await CodeRegistry(test_db).list_unregistered()]

        assert names == ["Delta", "Gamma"]


class TestImport:
    @pytest.mark.asyncio
    async def test_lines_are_independent(self, test_db):
        await add_entry(test_db, "Existing", "1234")
        items = [
            CompanyNameImportItem(name="Fresh", code="4321", contact_name="Dana"),
            CompanyNameImportItem(name="   "),
            CompanyNameImportItem(name="Existing"),
            CompanyNameImportItem(name="Taken Code", code="1234"),
            CompanyNameImportItem(name="Bad Code", code="12"),
        ]

        result = await CodeRegistry(test_db).import_entries(items)

        assert result.success is True
        assert result.total_rows == 5
        assert result.imported == 3
        assert result.skipped == 1
        assert result.errors == 1
        assert result.error_details[0]["row"] == 2
        assert result.skipped_details[0] == {"row": 3, "name": "Existing", "reason": "Already exists"}

        fresh = await code_registry.lookup_by_name(test_db, "Fresh")
        taken = await code_registry.lookup_by_name(test_db, "Taken Code")
        assert fresh.code == "4321"
        assert taken.code != "1234"
        assert code_registry.is_valid_code(taken.code)

    @pytest.mark.asyncio
    async def test_legacy_name_list(self, test_db):
        request = CompanyNameImportRequest(names=["Alpha", "Beta"])

        result = await CodeRegistry(test_db).import_entries(request.items())

        assert result.imported == 2

    @pytest.mark.asyncio
    async def test_duplicate_names_in_one_batch(self, test_db):
        items = [CompanyNameImportItem(name="Twin"), CompanyNameImportItem(name="Twin")]

        result = await CodeRegistry(test_db).import_entries(items)

        assert result.imported == 1
        assert result.skipped == 1
