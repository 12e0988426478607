from __future__ import annotations

import json

import httpx
import pytest

from docverify.core.errors import (
    DuplicateRegistrationError,
    MalformedResponseError,
    RequestError,
    RequestRejectedError,
    RequestTimeoutError,
    ServiceUnavailableError,
)
from docverify.schemas.document import FileDescriptor, Verdict
from docverify.services.verification_client import VerificationServiceClient

from conftest import BASE_URL

DIGEST = "a" * 64
DESCRIPTOR = FileDescriptor(name="report.pdf", size_bytes=1024, media_type="application/pdf")
ON_CHAIN = {"owner": "0xowner", "txHash": "0xabc", "blockNumber": 7, "blockTimestamp": 1_700_000_000}


def _client(mock_http_factory, handler) -> VerificationServiceClient:
    return VerificationServiceClient(mock_http_factory(handler), base_url=BASE_URL, timeout=3)


@pytest.mark.anyio
async def test_register_sends_metadata_only(mock_http_factory):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"receipt": {"transactionHash": "0xabc123", "blockNumber": 9}})

    receipt = await _client(mock_http_factory, handler).register(DIGEST, DESCRIPTOR, "ClientDemoUser")

    assert receipt.transaction_hash == "0xabc123"
    assert receipt.block_number == 9
    request = captured[0]
    assert request.method == "POST"
    assert str(request.url) == f"{BASE_URL}/documents/register"
    assert json.loads(request.content) == {
        "docHash": DIGEST,
        "filename": "report.pdf",
        "filesize": 1024,
        "mimeType": "application/pdf",
        "uploader": "ClientDemoUser",
    }


@pytest.mark.anyio
async def test_register_duplicate_is_distinct_from_transient_failure(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Document hash is already registered on-chain"})

    with pytest.raises(DuplicateRegistrationError) as exc_info:
        await _client(mock_http_factory, handler).register(DIGEST, DESCRIPTOR, "ClientDemoUser")

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == "Document hash is already registered on-chain"
    assert not exc_info.value.is_transient


@pytest.mark.anyio
async def test_rejection_carries_backend_message(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(400, json={"message": "filesize must be an integer"})

    with pytest.raises(RequestRejectedError) as exc_info:
        await _client(mock_http_factory, handler).register(DIGEST, DESCRIPTOR, "ClientDemoUser")

    assert not isinstance(exc_info.value, DuplicateRegistrationError)
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "filesize must be an integer"


@pytest.mark.anyio
async def test_rejection_without_body_uses_generic_message(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="Bad Gateway")

    with pytest.raises(RequestRejectedError, match="status code 502"):
        await _client(mock_http_factory, handler).verify(DIGEST)


@pytest.mark.anyio
async def test_rejection_falls_back_to_detail(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Not Found"})

    with pytest.raises(RequestRejectedError, match="Not Found"):
        await _client(mock_http_factory, handler).verify(DIGEST)


@pytest.mark.anyio
async def test_network_failure_raises_service_unavailable(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServiceUnavailableError, match="connection refused") as exc_info:
        await _client(mock_http_factory, handler).register(DIGEST, DESCRIPTOR, "ClientDemoUser")

    assert exc_info.value.status_code is None
    assert exc_info.value.is_transient


@pytest.mark.anyio
async def test_timeout_raises_request_timeout(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(RequestTimeoutError, match="timed out after 3s"):
        await _client(mock_http_factory, handler).verify(DIGEST)


@pytest.mark.anyio
async def test_malformed_success_body_raises(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"receipt": {}})

    with pytest.raises(MalformedResponseError):
        await _client(mock_http_factory, handler).register(DIGEST, DESCRIPTOR, "ClientDemoUser")


@pytest.mark.anyio
async def test_verify_sends_digest_only(mock_http_factory):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200, json={"status": "NOT_FOUND"})

    await _client(mock_http_factory, handler).verify(DIGEST)

    assert str(captured[0].url) == f"{BASE_URL}/documents/verify"
    assert json.loads(captured[0].content) == {"docHash": DIGEST}


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("body", "expected"),
    [
        (
            {"status": "VERIFIED_OK", "onChainData": ON_CHAIN, "offChainData": {"filename": "report.pdf"}},
            Verdict.VERIFIED_OK,
        ),
        ({"status": "VERIFIED_ON_CHAIN_ONLY", "onChainData": ON_CHAIN}, Verdict.VERIFIED_ON_CHAIN_ONLY),
        ({"status": "NOT_FOUND"}, Verdict.NOT_FOUND),
    ],
)
async def test_verify_reconciles_verdict(mock_http_factory, body, expected):
    result = await _client(mock_http_factory, lambda request: httpx.Response(200, json=body)).verify(DIGEST)

    assert result.verdict is expected
    assert result.reported_status == body["status"]


@pytest.mark.anyio
async def test_verify_facets_decide_over_reported_status(mock_http_factory):
    body = {"status": "VERIFIED_OK", "onChainData": ON_CHAIN}

    result = await _client(mock_http_factory, lambda request: httpx.Response(200, json=body)).verify(DIGEST)

    assert result.verdict is Verdict.VERIFIED_ON_CHAIN_ONLY
    assert result.on_chain is not None
    assert result.on_chain.tx_hash == "0xabc"
    assert result.off_chain is None


@pytest.mark.anyio
async def test_not_found_drops_orphan_off_chain_facet(mock_http_factory):
    body = {"status": "NOT_FOUND", "offChainData": {"filename": "report.pdf"}}

    result = await _client(mock_http_factory, lambda request: httpx.Response(200, json=body)).verify(DIGEST)

    assert result.verdict is Verdict.NOT_FOUND
    assert result.on_chain is None
    assert result.off_chain is None


@pytest.mark.anyio
async def test_all_failures_share_request_error_base(mock_http_factory):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "ledger offline"})

    with pytest.raises(RequestError, match="ledger offline"):
        await _client(mock_http_factory, handler).verify(DIGEST)
