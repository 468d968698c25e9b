"""
Tests for the Google Sheets storage backend.

The gspread worksheet is replaced by a MagicMock; no network calls.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import gspread
from tenacity import wait_none

from budget_ledger.errors import (
    ConcurrentUpdateError,
    DuplicateError,
    NotFoundError,
    StorageError,
    StorageConnectionError,
)
from budget_ledger.models import Account, Transaction
from budget_ledger.services.storage.google_sheets import (
    ACCOUNT_COLUMNS,
    GoogleSheetsAccountStorage,
)


CREATED = datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def make_account(owner="user-1", version=1, **overrides) -> Account:
    fields = dict(
        name="Main",
        description="Daily",
        budget=Decimal("1000"),
        current_balance=Decimal("380"),
        owner_id=owner,
        version=version,
        created_at=CREATED,
        updated_at=CREATED,
        transactions=[
            Transaction(value=Decimal("500"), type="salary", created_at=CREATED, updated_at=CREATED),
            Transaction(value=Decimal("-120"), created_at=CREATED, updated_at=CREATED),
        ],
    )
    fields.update(overrides)
    return Account(**fields)


def api_error(code=503) -> gspread.exceptions.APIError:
    response = MagicMock()
    response.json.return_value = {
        "error": {"code": code, "message": "backend error", "status": "UNAVAILABLE"}
    }
    return gspread.exceptions.APIError(response)


@pytest.fixture
def no_retry_wait(monkeypatch):
    monkeypatch.setattr(GoogleSheetsAccountStorage.save.retry, "wait", wait_none())


def make_storage(accounts=(), extra_rows=()):
    storage = GoogleSheetsAccountStorage(client=MagicMock())
    sheet = MagicMock()
    sheet.get_all_values.return_value = (
        [ACCOUNT_COLUMNS]
        + [storage._account_to_row(a) for a in accounts]
        + list(extra_rows)
    )
    storage._client.get_accounts_sheet.return_value = sheet
    return storage, sheet


class TestRowConversion:
    """Tests for row <-> Account conversion."""

    def test_row_has_every_column(self):
        """Test that a row lines up with the header."""
        storage, _ = make_storage()
        assert len(storage._account_to_row(make_account())) == len(ACCOUNT_COLUMNS)

    def test_row_round_trip(self):
        """Test that an account survives conversion with its ledger."""
        storage, _ = make_storage()
        account = make_account(is_favorite=True)
        restored = storage._row_to_account(storage._account_to_row(account))
        assert restored.model_dump() == account.model_dump()


class TestReads:
    """Tests for find_one, find and count_documents."""

    @pytest.mark.asyncio
    async def test_find_one(self):
        """Test lookup by id."""
        account = make_account()
        storage, _ = make_storage([account, make_account(owner="user-2")])
        found = await storage.find_one(str(account.id))
        assert found.id == account.id
        assert len(found.transactions) == 2

    @pytest.mark.asyncio
    async def test_find_one_missing(self):
        """Test that an unknown id returns None."""
        storage, _ = make_storage([make_account()])
        assert await storage.find_one("no-such-id") is None

    @pytest.mark.asyncio
    async def test_find_filters_by_owner(self):
        """Test that only the owner's accounts come back, in sheet order."""
        first, second = make_account(name="A"), make_account(name="B")
        storage, _ = make_storage([first, make_account(owner="user-2"), second])
        found = await storage.find("user-1")
        assert [a.name for a in found] == ["A", "B"]
        assert await storage.count_documents("user-1") == 2

    @pytest.mark.asyncio
    async def test_find_skips_malformed_rows(self):
        """Test that a broken row does not hide the others."""
        bad_row = ["not-a-uuid", "user-1", "1", "Broken"]
        storage, _ = make_storage([make_account()], extra_rows=[bad_row])
        found = await storage.find("user-1")
        assert len(found) == 1

    @pytest.mark.asyncio
    async def test_backend_failure(self):
        """Test that backend exceptions surface as StorageError."""
        storage, sheet = make_storage()
        sheet.get_all_values.side_effect = RuntimeError("quota exceeded")
        with pytest.raises(StorageError):
            await storage.find("user-1")


class TestWrites:
    """Tests for save and find_one_and_delete."""

    @pytest.mark.asyncio
    async def test_insert(self):
        """Test that a new account is appended as a row."""
        storage, sheet = make_storage()
        account = make_account()
        await storage.save(account, expected_version=None)
        sheet.append_row.assert_called_once_with(
            storage._account_to_row(account), value_input_option="RAW"
        )

    @pytest.mark.asyncio
    async def test_insert_duplicate(self):
        """Test that inserting an existing id fails."""
        account = make_account()
        storage, sheet = make_storage([account])
        with pytest.raises(DuplicateError):
            await storage.save(account, expected_version=None)
        sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_insert_landed_despite_api_error(self):
        """Test that an append reported as failed but present in the sheet counts as saved."""
        storage, sheet = make_storage()
        account = make_account()
        sheet.get_all_values.side_effect = [
            [ACCOUNT_COLUMNS],
            [ACCOUNT_COLUMNS, storage._account_to_row(account)],
        ]
        sheet.append_row.side_effect = api_error()

        saved = await storage.save(account, expected_version=None)

        assert saved.id == account.id
        sheet.append_row.assert_called_once()

    @pytest.mark.asyncio
    async def test_insert_retried_after_transient_error(self, no_retry_wait):
        """Test that an append that did not land is retried."""
        storage, sheet = make_storage()
        account = make_account()
        sheet.append_row.side_effect = [api_error(), None]

        await storage.save(account, expected_version=None)

        assert sheet.append_row.call_count == 2

    @pytest.mark.asyncio
    async def test_insert_gives_up_after_retries(self, no_retry_wait):
        """Test that persistent API errors surface as StorageConnectionError."""
        storage, sheet = make_storage()
        sheet.append_row.side_effect = api_error()

        with pytest.raises(StorageConnectionError):
            await storage.save(make_account(), expected_version=None)
        assert sheet.append_row.call_count == 3

    @pytest.mark.asyncio
    async def test_update_matching_version(self):
        """Test that a save based on the stored version replaces the row."""
        account = make_account(version=3)
        storage, sheet = make_storage([account])
        updated = account.model_copy(update={"version": 4, "name": "Renamed"})

        await storage.save(updated, expected_version=3)

        sheet.update.assert_called_once()
        kwargs = sheet.update.call_args.kwargs
        assert kwargs["range_name"] == "A2"
        assert kwargs["values"] == [storage._account_to_row(updated)]

    @pytest.mark.asyncio
    async def test_update_stale_version(self):
        """Test that a save based on an old version is rejected."""
        account = make_account(version=3)
        storage, sheet = make_storage([account])
        with pytest.raises(ConcurrentUpdateError):
            await storage.save(account.model_copy(update={"version": 3}), expected_version=2)
        sheet.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_update_missing(self):
        """Test that replacing a missing account fails."""
        storage, _ = make_storage()
        with pytest.raises(NotFoundError):
            await storage.save(make_account(), expected_version=1)

    @pytest.mark.asyncio
    async def test_find_one_and_delete(self):
        """Test that the matching row is deleted and returned."""
        keep, remove = make_account(name="Keep"), make_account(name="Remove")
        storage, sheet = make_storage([keep, remove])

        deleted = await storage.find_one_and_delete(str(remove.id))

        assert deleted.name == "Remove"
        sheet.delete_rows.assert_called_once_with(3)

    @pytest.mark.asyncio
    async def test_find_one_and_delete_missing(self):
        """Test that deleting an unknown id returns None."""
        storage, sheet = make_storage([make_account()])
        assert await storage.find_one_and_delete("no-such-id") is None
        sheet.delete_rows.assert_not_called()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
