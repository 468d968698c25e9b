"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as a storage backend because:
1. Non-technical users can view their accounts directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

One row per account. The embedded transactions are JSON-serialized into
a single cell, so balance and ledger are written by the same row update.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- The version check reads the row and then writes it; Sheets offers no
  compare-and-swap, so two writers within that window can still race
- Limited query capabilities (we filter in Python)
"""

import json
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

import gspread
from google.oauth2.service_account import Credentials
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from budget_ledger.config import get_settings
from budget_ledger.errors import (
    ConcurrentUpdateError,
    DuplicateError,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)
from budget_ledger.logs import get_logger
from budget_ledger.models import Account, Transaction
from budget_ledger.services.storage.interface import AccountStorageInterface


# Column mappings for Accounts sheet
ACCOUNT_COLUMNS = [
    "id",
    "owner_id",
    "version",
    "name",
    "description",
    "budget",
    "current_balance",
    "is_favorite",
    "created_at",
    "updated_at",
    "transactions_json",
]

logger = get_logger(__name__)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StorageConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise StorageConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_accounts_sheet(self) -> gspread.Worksheet:
        """Get or create the Accounts worksheet."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(self._settings.accounts_sheet_name)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=self._settings.accounts_sheet_name,
                rows=1000,
                cols=len(ACCOUNT_COLUMNS),
            )
            sheet.append_row(ACCOUNT_COLUMNS)
        return sheet


def _storage_failure(action: str, error: Exception) -> StorageError:
    """Map a backend exception onto the storage error hierarchy."""
    if isinstance(error, StorageError):
        return error
    if isinstance(error, gspread.exceptions.APIError):
        return StorageConnectionError(f"Failed to {action}: {error}")
    return StorageError(f"Failed to {action}: {error}")


_retry_transient = retry(
    retry=retry_if_exception_type(StorageConnectionError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)


class GoogleSheetsAccountStorage(AccountStorageInterface):
    """
    Google Sheets implementation of account storage.

    Accounts are stored as rows in a worksheet with one account per row.
    Only transient API failures are retried; version conflicts never are.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _account_to_row(self, account: Account) -> list:
        """Convert an Account to a spreadsheet row."""
        return [
            str(account.id),
            account.owner_id,
            str(account.version),
            account.name,
            account.description or "",
            str(account.budget),
            str(account.current_balance),
            str(account.is_favorite),
            account.created_at.isoformat(),
            account.updated_at.isoformat(),
            json.dumps([t.model_dump(mode="json") for t in account.transactions]),
        ]

    def _row_to_account(self, row: list) -> Account:
        """Convert a spreadsheet row to an Account."""
        # Handle missing columns gracefully
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        transactions = []
        transactions_json = safe_get(10)
        if transactions_json:
            transactions = [
                Transaction.model_validate(item)
                for item in json.loads(transactions_json)
            ]

        return Account(
            id=UUID(safe_get(0)),
            owner_id=safe_get(1),
            version=int(safe_get(2, "0")),
            name=safe_get(3),
            description=safe_get(4),
            budget=Decimal(safe_get(5, "0")),
            current_balance=Decimal(safe_get(6, "0")),
            is_favorite=safe_get(7).lower() == "true",
            created_at=datetime.fromisoformat(safe_get(8)),
            updated_at=datetime.fromisoformat(safe_get(9)),
            transactions=transactions,
        )

    def _rows(self) -> list[tuple[int, list]]:
        """(sheet row number, row) for every data row, header skipped."""
        sheet = self._client.get_accounts_sheet()
        all_rows = sheet.get_all_values()
        # Start from 2 (row 1 is header)
        return [
            (idx, row)
            for idx, row in enumerate(all_rows[1:], start=2)
            if row and row[0]
        ]

    def _has_row(self, account_id: str, version: int) -> bool:
        return any(
            row[0] == account_id and len(row) > 2 and row[2] == str(version)
            for _, row in self._rows()
        )

    def _parse_rows(self, rows: list[tuple[int, list]]) -> list[Account]:
        accounts = []
        for idx, row in rows:
            try:
                accounts.append(self._row_to_account(row))
            except Exception as e:
                logger.warning("malformed_account_row", row=idx, error=str(e))
        return accounts

    @_retry_transient
    async def find_one(self, account_id: str) -> Optional[Account]:
        """Retrieve an account by its ID."""
        try:
            for _, row in self._rows():
                if row[0] == str(account_id):
                    return self._row_to_account(row)
            return None
        except Exception as e:
            raise _storage_failure("get account", e)

    @_retry_transient
    async def find(self, owner_id: str) -> list[Account]:
        """All accounts of one owner, in sheet order."""
        try:
            rows = [
                (idx, row) for idx, row in self._rows()
                if len(row) > 1 and row[1] == owner_id
            ]
            return self._parse_rows(rows)
        except Exception as e:
            raise _storage_failure("list accounts", e)

    @_retry_transient
    async def save(
        self,
        account: Account,
        expected_version: Optional[int] = None,
    ) -> Account:
        """Insert or replace an account row after checking its version."""
        key = str(account.id)
        try:
            sheet = self._client.get_accounts_sheet()
            existing = next(
                ((idx, row) for idx, row in self._rows() if row[0] == key),
                None,
            )

            if expected_version is None:
                if existing is not None:
                    raise DuplicateError(f"Account already exists: {key}", account_id=key)
                try:
                    sheet.append_row(self._account_to_row(account), value_input_option="RAW")
                except gspread.exceptions.APIError:
                    # The append can land even though the call reported an error
                    if self._has_row(key, account.version):
                        logger.warning("account_insert_confirmed_after_error", account_id=key)
                        return account
                    raise
                return account

            if existing is None:
                raise NotFoundError("Account not found.", account_id=key)

            idx, row = existing
            stored_version = int(row[2]) if len(row) > 2 and row[2] else 0
            if stored_version != expected_version:
                raise ConcurrentUpdateError(
                    f"Account {key} was modified concurrently",
                    account_id=key,
                    expected_version=expected_version,
                    stored_version=stored_version,
                )

            sheet.update(
                range_name=f"A{idx}",
                values=[self._account_to_row(account)],
                value_input_option="RAW",
            )
            return account
        except (NotFoundError, DuplicateError, ConcurrentUpdateError):
            raise
        except Exception as e:
            logger.error("account_save_failed", account_id=key, error=str(e))
            raise _storage_failure("save account", e)

    @_retry_transient
    async def find_one_and_delete(self, account_id: str) -> Optional[Account]:
        """Delete an account row and return what it held."""
        try:
            sheet = self._client.get_accounts_sheet()
            for idx, row in self._rows():
                if row[0] == str(account_id):
                    account = self._row_to_account(row)
                    sheet.delete_rows(idx)
                    return account
            return None
        except Exception as e:
            raise _storage_failure("delete account", e)

    @_retry_transient
    async def count_documents(self, owner_id: str) -> int:
        """Number of account rows for an owner."""
        try:
            return sum(
                1 for _, row in self._rows()
                if len(row) > 1 and row[1] == owner_id
            )
        except Exception as e:
            raise _storage_failure("count accounts", e)
