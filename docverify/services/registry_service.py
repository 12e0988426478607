from __future__ import annotations

from docverify.core.logger import get_logger
from docverify.schemas.document import (
    OffChainFacet,
    OnChainFacet,
    RegisterRequest,
    RegisterResponse,
    RegistrationReceipt,
    VerifyResponse,
)
from docverify.services.ledger_service import LedgerService
from docverify.services.metadata_store import DocumentMetadataRecord, MetadataStore
from docverify.services.verdict import classify_verdict

logger = get_logger(component="RegistryService")


class RegistryService:
    def __init__(self, *, ledger_service: LedgerService, metadata_store: MetadataStore) -> None:
        self.ledger_service = ledger_service
        self.metadata_store = metadata_store

    async def register(self, request: RegisterRequest) -> RegisterResponse:
        """Anchor the digest on the ledger, then store its off-chain metadata.

        The ledger write is authoritative. A failed metadata write is logged and the
        receipt is still returned, leaving an on-chain-only registration.
        """
        record = await self.ledger_service.register_document(document_hash=request.doc_hash)

        try:
            await self.metadata_store.save(
                DocumentMetadataRecord(
                    document_hash=request.doc_hash,
                    filename=request.filename,
                    filesize=request.filesize,
                    mime_type=request.mime_type,
                    uploader=request.uploader,
                )
            )
        except Exception as exc:
            logger.exception(
                "Off-chain metadata save failed after ledger registration",
                document_hash=request.doc_hash,
                tx_hash=record.transaction_hash,
                error=str(exc),
            )

        return RegisterResponse(
            receipt=RegistrationReceipt(
                transaction_hash=record.transaction_hash,
                block_number=record.block_number,
                block_timestamp=record.block_timestamp,
                owner=record.owner,
            )
        )

    async def verify(self, document_hash: str) -> VerifyResponse:
        record = await self.ledger_service.get_record(document_hash=document_hash)
        if record is None:
            logger.info("Document not found on ledger", document_hash=document_hash)
            return VerifyResponse(status=classify_verdict(None, None).value)

        on_chain = OnChainFacet(
            owner=record.owner,
            tx_hash=record.transaction_hash,
            block_number=record.block_number,
            block_timestamp=record.block_timestamp,
        )
        metadata = await self.metadata_store.get(document_hash)
        off_chain = (
            OffChainFacet(
                filename=metadata.filename,
                filesize=metadata.filesize,
                mime_type=metadata.mime_type,
                uploader=metadata.uploader,
            )
            if metadata
            else None
        )
        verdict = classify_verdict(on_chain, off_chain)
        logger.info("Document verification processed", document_hash=document_hash, status=verdict.value)
        return VerifyResponse(status=verdict.value, on_chain_data=on_chain, off_chain_data=off_chain)
