from __future__ import annotations

import asyncio
import hashlib
import time
from dataclasses import dataclass

from docverify.core.config import settings
from docverify.core.logger import get_logger

logger = get_logger(component="LedgerService")


class DuplicateDocumentError(Exception):
    """Raised when a digest is already anchored on the ledger."""


@dataclass(frozen=True)
class LedgerRecord:
    document_hash: str
    owner: str
    transaction_hash: str
    block_number: int
    block_timestamp: int


class LedgerService:
    """In-memory append-only ledger that anchors document digests.

    Records are never updated or removed once written.
    """

    def __init__(self, *, owner_address: str | None = None, genesis_block: int | None = None) -> None:
        self.owner_address = owner_address or settings.ledger_account_address
        self._block_number = genesis_block if genesis_block is not None else settings.ledger_genesis_block
        self._records: dict[str, LedgerRecord] = {}
        self._lock = asyncio.Lock()

    async def register_document(self, *, document_hash: str) -> LedgerRecord:
        async with self._lock:
            if document_hash in self._records:
                logger.warning("Duplicate ledger registration", document_hash=document_hash)
                raise DuplicateDocumentError("Document hash is already registered on-chain")

            self._block_number += 1
            record = LedgerRecord(
                document_hash=document_hash,
                owner=self.owner_address,
                transaction_hash=self._transaction_hash(document_hash, self._block_number),
                block_number=self._block_number,
                block_timestamp=int(time.time()),
            )
            self._records[document_hash] = record

        logger.info(
            "Document anchored on ledger",
            document_hash=document_hash,
            tx_hash=record.transaction_hash,
            block_number=record.block_number,
        )
        return record

    async def get_record(self, *, document_hash: str) -> LedgerRecord | None:
        return self._records.get(document_hash)

    def _transaction_hash(self, document_hash: str, block_number: int) -> str:
        seed = f"{self.owner_address}:{document_hash}:{block_number}".encode()
        return "0x" + hashlib.sha256(seed).hexdigest()
