from __future__ import annotations


class DocumentIntegrityError(Exception):
    """Base class for every error raised by the integrity workflow."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class HashComputationError(DocumentIntegrityError):
    """Raised when a file cannot be read or the digest primitive fails."""


class RequestError(DocumentIntegrityError):
    """Raised when a call to the verification service does not succeed.

    ``status_code`` is the HTTP status returned by the backend, or ``None`` when
    the request never produced a response.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        return False


class ServiceUnavailableError(RequestError):
    """The backend could not be reached."""

    @property
    def is_transient(self) -> bool:
        return True


class RequestTimeoutError(RequestError):
    """The backend did not answer within the configured timeout."""

    @property
    def is_transient(self) -> bool:
        return True


class RequestRejectedError(RequestError):
    """The backend answered with a non-2xx status."""


class DuplicateRegistrationError(RequestRejectedError):
    """The digest is already anchored on the ledger."""


class MalformedResponseError(RequestError):
    """The backend answered 2xx with a body that does not match the contract."""


class StateContractViolation(DocumentIntegrityError):
    """An action was invoked without a ready digest or while another one is in flight."""
