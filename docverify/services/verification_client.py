from __future__ import annotations

from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from docverify.core.config import settings
from docverify.core.errors import (
    DuplicateRegistrationError,
    MalformedResponseError,
    RequestRejectedError,
    RequestTimeoutError,
    ServiceUnavailableError,
)
from docverify.core.logger import get_logger
from docverify.schemas.document import (
    FileDescriptor,
    RegisterRequest,
    RegisterResponse,
    RegistrationReceipt,
    VerificationResult,
    VerifyRequest,
    VerifyResponse,
)
from docverify.services.verdict import classify_verdict

logger = get_logger(component="VerificationServiceClient")


class VerificationServiceClient:
    """
    Client for the ledger-backed document verification service.

    Only digests and descriptive metadata leave the machine; file bytes are never sent.
    Every failure is normalised into a ``RequestError`` subclass.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.http_client = http_client
        self.base_url = (base_url or settings.verification_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.verification_service_timeout

    async def register(
        self, content_digest: str, descriptor: FileDescriptor, uploader_id: str
    ) -> RegistrationReceipt:
        payload = RegisterRequest(
            doc_hash=content_digest,
            filename=descriptor.name,
            filesize=descriptor.size_bytes,
            mime_type=descriptor.media_type,
            uploader=uploader_id,
        )
        response = await self._post("/documents/register", payload, action="register")
        if response.status_code == httpx.codes.CONFLICT:
            raise DuplicateRegistrationError(
                _error_message(response, "Document is already registered"),
                status_code=response.status_code,
            )
        self._raise_for_status(response, action="register")

        body = self._parse(response, RegisterResponse, action="register")
        logger.info(
            "Document registered",
            doc_hash=content_digest,
            transaction_hash=body.receipt.transaction_hash,
        )
        return body.receipt

    async def verify(self, content_digest: str) -> VerificationResult:
        response = await self._post("/documents/verify", VerifyRequest(doc_hash=content_digest), action="verify")
        self._raise_for_status(response, action="verify")

        body = self._parse(response, VerifyResponse, action="verify")
        verdict = classify_verdict(body.on_chain_data, body.off_chain_data)
        if body.status != verdict.value:
            logger.warning(
                "Backend status disagrees with facets",
                doc_hash=content_digest,
                reported_status=body.status,
                verdict=verdict.value,
            )
        logger.info("Document verified", doc_hash=content_digest, verdict=verdict.value)
        return VerificationResult(
            verdict=verdict,
            on_chain=body.on_chain_data,
            off_chain=body.off_chain_data if body.on_chain_data is not None else None,
            reported_status=body.status,
        )

    async def _post(self, path: str, payload: BaseModel, *, action: str) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            return await self.http_client.post(
                url,
                json=payload.model_dump(by_alias=True),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as exc:
            logger.error("Verification service timeout", action=action, url=url, timeout=self.timeout)
            raise RequestTimeoutError(f"Request timed out after {self.timeout:g}s") from exc
        except httpx.RequestError as exc:
            logger.error("Verification service unreachable", action=action, url=url, error=str(exc))
            raise ServiceUnavailableError(f"Network error: {exc}") from exc

    def _raise_for_status(self, response: httpx.Response, *, action: str) -> None:
        if response.is_success:
            return
        message = _error_message(response, f"Request failed with status code {response.status_code}")
        logger.warning(
            "Verification service rejected request",
            action=action,
            status_code=response.status_code,
            message=message,
        )
        raise RequestRejectedError(message, status_code=response.status_code)

    def _parse(self, response: httpx.Response, model: type[Any], *, action: str) -> Any:
        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Malformed verification service response", action=action, error=str(exc))
            raise MalformedResponseError(
                f"Unexpected response from verification service: {exc}",
                status_code=response.status_code,
            ) from exc


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        data = response.json()
    except ValueError:
        return fallback
    if isinstance(data, dict):
        for key in ("message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return fallback
