"""
Tests for configuration loading.
"""

import pytest

from pydantic import ValidationError as PydanticValidationError

from budget_ledger.config import LedgerSettings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestLedgerSettings:
    """Tests for LedgerSettings."""

    def test_defaults(self, monkeypatch):
        """Test the documented defaults."""
        for name in ("DEFAULT_ACCOUNT_NAME", "UNTYPED_KEY", "SUMMARY_TIMEZONE", "ALLOW_BALANCE_OVERRIDE"):
            monkeypatch.delenv(f"LEDGER_{name}", raising=False)
        settings = LedgerSettings()
        assert settings.default_account_name == "Account"
        assert settings.untyped_key == "untyped"
        assert settings.allow_balance_override is False
        assert settings.summary_tzinfo is None

    def test_environment_override(self, monkeypatch):
        """Test that LEDGER_ variables are picked up."""
        monkeypatch.setenv("LEDGER_DEFAULT_ACCOUNT_NAME", "Wallet")
        monkeypatch.setenv("LEDGER_ALLOW_BALANCE_OVERRIDE", "true")
        monkeypatch.setenv("LEDGER_DEFAULT_PAGE_LIMIT", "5")
        settings = LedgerSettings()
        assert settings.default_account_name == "Wallet"
        assert settings.allow_balance_override is True
        assert settings.default_page_limit == 5

    def test_blank_timezone_means_local(self):
        """Test that an empty zone name falls back to server local time."""
        assert LedgerSettings(summary_timezone="").summary_tzinfo is None

    def test_unknown_timezone(self):
        """Test that unknown zone names fail at startup."""
        with pytest.raises(PydanticValidationError):
            LedgerSettings(summary_timezone="Not/A_Zone")

    def test_negative_page_limit(self):
        """Test that the default page size cannot be negative."""
        with pytest.raises(PydanticValidationError):
            LedgerSettings(default_page_limit=-1)

    def test_unknown_backend(self):
        """Test that only known storage backends are accepted."""
        with pytest.raises(PydanticValidationError):
            LedgerSettings(storage_backend="postgres")


class TestValidateAllSettings:
    """Tests for validate_all_settings."""

    def test_memory_backend(self, monkeypatch):
        """Test that the memory backend needs no Sheets configuration."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        results = validate_all_settings()
        assert results["ledger"] is True
        assert "google_sheets" not in results

    def test_sheets_backend_missing_config(self, monkeypatch):
        """Test that a Sheets backend without credentials is reported."""
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "google_sheets")
        monkeypatch.delenv("GOOGLE_SHEETS_CREDENTIALS_PATH", raising=False)
        monkeypatch.delenv("GOOGLE_SHEETS_SPREADSHEET_ID", raising=False)
        results = validate_all_settings()
        assert results["google_sheets"] is False
        assert "google_sheets_error" in results


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
