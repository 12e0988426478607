from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum as PyEnum

from docverify.core.errors import DocumentIntegrityError, RequestError
from docverify.schemas.document import FileDescriptor, RegistrationReceipt, VerificationResult, Verdict


class WorkflowPhase(str, PyEnum):
    IDLE = "idle"
    HASHING = "hashing"
    HASH_READY = "hash_ready"
    REGISTERING = "registering"
    VERIFYING = "verifying"
    SETTLED = "settled"
    FAILED = "failed"


class WorkflowAction(str, PyEnum):
    REGISTER = "register"
    VERIFY = "verify"


class StatusKind(str, PyEnum):
    IDLE = "idle"
    HASHING = "hashing"
    HASH_READY = "hash_ready"
    HASH_FAILED = "hash_failed"
    REGISTERING = "registering"
    REGISTERED = "registered"
    REGISTRATION_FAILED = "registration_failed"
    VERIFYING = "verifying"
    VERIFIED_OK = "verified_ok"
    VERIFIED_ON_CHAIN_ONLY = "verified_on_chain_only"
    NOT_FOUND = "not_found"
    VERIFICATION_FAILED = "verification_failed"


class Severity(str, PyEnum):
    NEUTRAL = "neutral"
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    ERROR = "error"


@dataclass(frozen=True)
class StatusLine:
    kind: StatusKind
    severity: Severity
    message: str


IDLE_STATUS = StatusLine(StatusKind.IDLE, Severity.NEUTRAL, "Select a file to begin...")

_VERDICT_STATUS: dict[Verdict, tuple[StatusKind, Severity, str]] = {
    Verdict.VERIFIED_OK: (
        StatusKind.VERIFIED_OK,
        Severity.SUCCESS,
        "Integrity VERIFIED. Document is original and registered on-chain.",
    ),
    Verdict.VERIFIED_ON_CHAIN_ONLY: (
        StatusKind.VERIFIED_ON_CHAIN_ONLY,
        Severity.WARNING,
        "Hash found on-chain, but off-chain metadata is missing. Integrity check OK.",
    ),
    Verdict.NOT_FOUND: (
        StatusKind.NOT_FOUND,
        Severity.DANGER,
        "Not found on-chain. Document is unregistered or tampered.",
    ),
}


def hashing_status(filename: str) -> StatusLine:
    return StatusLine(StatusKind.HASHING, Severity.INFO, f"Calculating SHA-256 for: {filename}...")


def hash_ready_status(digest: str) -> StatusLine:
    return StatusLine(StatusKind.HASH_READY, Severity.NEUTRAL, f"Hash calculated: {digest[:10]}...")


def in_flight_status(action: WorkflowAction) -> StatusLine:
    if action is WorkflowAction.REGISTER:
        return StatusLine(StatusKind.REGISTERING, Severity.INFO, "Attempting to register on-chain...")
    return StatusLine(StatusKind.VERIFYING, Severity.INFO, "Checking integrity against on-chain record...")


def registered_status(receipt: RegistrationReceipt) -> StatusLine:
    return StatusLine(
        StatusKind.REGISTERED,
        Severity.SUCCESS,
        f"Registered! TX: {receipt.transaction_hash[:10]}...",
    )


def verdict_status(verdict: Verdict) -> StatusLine:
    return StatusLine(*_VERDICT_STATUS[verdict])


def failure_status(action: WorkflowAction | None, error: DocumentIntegrityError) -> StatusLine:
    # Transient transport failures are retryable and reported as warnings.
    severity = Severity.WARNING if isinstance(error, RequestError) and error.is_transient else Severity.ERROR
    if action is WorkflowAction.REGISTER:
        return StatusLine(StatusKind.REGISTRATION_FAILED, severity, f"Registration failed: {error.message}")
    if action is WorkflowAction.VERIFY:
        return StatusLine(StatusKind.VERIFICATION_FAILED, severity, f"Verification failed: {error.message}")
    return StatusLine(StatusKind.HASH_FAILED, Severity.ERROR, f"Error calculating hash: {error.message}")


@dataclass(frozen=True)
class WorkflowSession:
    """Immutable snapshot of one file's integrity workflow.

    ``generation`` changes on every selection or reset; results computed for an
    older generation are never applied to a newer session.
    """

    generation: int
    phase: WorkflowPhase = WorkflowPhase.IDLE
    status: StatusLine = IDLE_STATUS
    descriptor: FileDescriptor | None = None
    digest: str | None = None
    action: WorkflowAction | None = None
    receipt: RegistrationReceipt | None = None
    verification: VerificationResult | None = None
    error: DocumentIntegrityError | None = None

    @property
    def has_digest(self) -> bool:
        return bool(self.digest) and self.descriptor is not None

    @property
    def in_flight(self) -> bool:
        return self.phase in (WorkflowPhase.HASHING, WorkflowPhase.REGISTERING, WorkflowPhase.VERIFYING)

    @property
    def can_act(self) -> bool:
        return self.has_digest and not self.in_flight

    @property
    def verdict(self) -> Verdict | None:
        return self.verification.verdict if self.verification else None

    def evolve(self, **changes) -> "WorkflowSession":
        return replace(self, **changes)
