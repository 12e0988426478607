from __future__ import annotations

import re
from enum import Enum as PyEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

DIGEST_PATTERN = re.compile(r"[0-9a-f]{64}")
DEFAULT_MEDIA_TYPE = "application/octet-stream"


class Verdict(str, PyEnum):
    VERIFIED_OK = "VERIFIED_OK"
    VERIFIED_ON_CHAIN_ONLY = "VERIFIED_ON_CHAIN_ONLY"
    NOT_FOUND = "NOT_FOUND"


class WireModel(BaseModel):
    """Base for payloads exchanged with the verification service (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class FileDescriptor(WireModel):
    name: str
    size_bytes: int = Field(ge=0)
    media_type: str = DEFAULT_MEDIA_TYPE

    @field_validator("media_type", mode="before")
    @classmethod
    def default_media_type(cls, value: str | None) -> str:
        if not value:
            return DEFAULT_MEDIA_TYPE
        return value


class HashedDocument(WireModel):
    digest: str
    descriptor: FileDescriptor


class OnChainFacet(WireModel):
    owner: str
    tx_hash: str | None = Field(default=None, alias="txHash")
    block_number: int | None = Field(default=None, alias="blockNumber")
    block_timestamp: int | None = Field(default=None, alias="blockTimestamp")


class OffChainFacet(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    filename: str
    filesize: int | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")
    uploader: str | None = None


class RegistrationReceipt(WireModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    transaction_hash: str = Field(alias="transactionHash")
    block_number: int | None = Field(default=None, alias="blockNumber")
    block_timestamp: int | None = Field(default=None, alias="blockTimestamp")
    owner: str | None = None


class RegisterRequest(WireModel):
    doc_hash: str = Field(alias="docHash")
    filename: str
    filesize: int = Field(ge=0)
    mime_type: str = Field(alias="mimeType")
    uploader: str

    @field_validator("doc_hash")
    @classmethod
    def validate_digest(cls, value: str) -> str:
        return _validate_digest(value)


class RegisterResponse(WireModel):
    receipt: RegistrationReceipt


class VerifyRequest(WireModel):
    doc_hash: str = Field(alias="docHash")

    @field_validator("doc_hash")
    @classmethod
    def validate_digest(cls, value: str) -> str:
        return _validate_digest(value)


class VerifyResponse(WireModel):
    status: str
    on_chain_data: OnChainFacet | None = Field(default=None, alias="onChainData")
    off_chain_data: OffChainFacet | None = Field(default=None, alias="offChainData")


class VerificationResult(BaseModel):
    """Reconciled outcome of a verify call, as seen by the workflow."""

    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    on_chain: OnChainFacet | None = None
    off_chain: OffChainFacet | None = None
    reported_status: str | None = None


class ErrorResponse(BaseModel):
    message: str


def _validate_digest(value: str) -> str:
    if not DIGEST_PATTERN.fullmatch(value):
        raise ValueError("docHash must be a 64 character lower-case hex SHA-256 digest")
    return value
