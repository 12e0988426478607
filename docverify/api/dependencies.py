from __future__ import annotations

from functools import lru_cache

from docverify.services.ledger_service import LedgerService
from docverify.services.metadata_store import MetadataStore
from docverify.services.registry_service import RegistryService


@lru_cache(maxsize=1)
def get_ledger_service() -> LedgerService:
    return LedgerService()


@lru_cache(maxsize=1)
def get_metadata_store() -> MetadataStore:
    return MetadataStore()


@lru_cache(maxsize=1)
def get_registry_service() -> RegistryService:
    return RegistryService(ledger_service=get_ledger_service(), metadata_store=get_metadata_store())
