"""
Application Wiring

Builds a ready-to-use AccountService from settings. Transport layers
(HTTP, bots, CLIs) call ``create_account_service()`` once at startup.
"""

from typing import Optional

from budget_ledger.accounts import AccountService
from budget_ledger.config import LedgerSettings, get_settings
from budget_ledger.logs import configure_logging, get_logger
from budget_ledger.services import (
    AccountStorageInterface,
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
    IdentityInterface,
    InMemoryAccountStorage,
    PassthroughIdentity,
)


def create_storage(settings: LedgerSettings) -> AccountStorageInterface:
    """Storage backend selected by ``storage_backend``."""
    if settings.storage_backend == "google_sheets":
        return GoogleSheetsAccountStorage(GoogleSheetsClient())
    return InMemoryAccountStorage()


def create_account_service(
    settings: Optional[LedgerSettings] = None,
    storage: Optional[AccountStorageInterface] = None,
    identity: Optional[IdentityInterface] = None,
) -> AccountService:
    """
    Factory function to create the account service.

    Args:
        settings: Engine settings; loaded from the environment when None
        storage: Overrides the configured backend (useful in tests)
        identity: Owner resolution; user ids are used as-is when None
    """
    settings = settings or get_settings().ledger
    configure_logging(settings.log_level, json=settings.log_json)

    storage = storage or create_storage(settings)

    get_logger(__name__).info(
        "account_service_created",
        environment=settings.app_environment,
        storage=type(storage).__name__,
    )
    return AccountService(
        storage=storage,
        identity=identity or PassthroughIdentity(),
        settings=settings,
    )
