from __future__ import annotations

from dataclasses import dataclass

from docverify.core.logger import get_logger

logger = get_logger(component="MetadataStore")


@dataclass(frozen=True)
class DocumentMetadataRecord:
    document_hash: str
    filename: str
    filesize: int
    mime_type: str
    uploader: str


class MetadataStore:
    """Off-chain copy of descriptive document metadata, keyed by digest."""

    def __init__(self) -> None:
        self._records: dict[str, DocumentMetadataRecord] = {}

    async def save(self, record: DocumentMetadataRecord) -> None:
        self._records[record.document_hash] = record
        logger.info("Document metadata saved", document_hash=record.document_hash, filename=record.filename)

    async def get(self, document_hash: str) -> DocumentMetadataRecord | None:
        return self._records.get(document_hash)
