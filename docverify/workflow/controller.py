from __future__ import annotations

from collections.abc import Awaitable, Callable
from os import PathLike
from pathlib import Path
from typing import Any, Protocol

import httpx

from docverify.core.config import settings
from docverify.core.errors import (
    DocumentIntegrityError,
    HashComputationError,
    RequestError,
    StateContractViolation,
)
from docverify.core.logger import get_logger
from docverify.schemas.document import FileDescriptor, HashedDocument, RegistrationReceipt, VerificationResult
from docverify.services.hashing_service import HashingService
from docverify.services.verification_client import VerificationServiceClient
from docverify.workflow.session import (
    WorkflowAction,
    WorkflowPhase,
    WorkflowSession,
    failure_status,
    hash_ready_status,
    hashing_status,
    in_flight_status,
    registered_status,
    verdict_status,
)

logger = get_logger(component="IntegrityWorkflowController")


class VerificationClient(Protocol):
    async def register(
        self, content_digest: str, descriptor: FileDescriptor, uploader_id: str
    ) -> RegistrationReceipt: ...

    async def verify(self, content_digest: str) -> VerificationResult: ...


class IntegrityWorkflowController:
    """
    Drives one user's document through hashing and a single register/verify action.

    The controller owns the session exclusively. Every transition replaces the
    session snapshot; results that come back for an older generation are dropped.
    """

    def __init__(
        self,
        *,
        hashing_service: HashingService,
        verification_client: VerificationClient,
        uploader_id: str | None = None,
    ) -> None:
        self.hashing_service = hashing_service
        self.verification_client = verification_client
        self.uploader_id = uploader_id or settings.uploader_id
        self._session = WorkflowSession(generation=0)

    @property
    def session(self) -> WorkflowSession:
        return self._session

    @property
    def can_act(self) -> bool:
        return self._session.can_act

    def clear_selection(self) -> WorkflowSession:
        self._session = WorkflowSession(generation=self._session.generation + 1)
        logger.info("Selection cleared", generation=self._session.generation)
        return self._session

    async def select_file(self, path: str | PathLike[str]) -> WorkflowSession:
        file_path = Path(path)
        return await self._select(file_path.name, lambda: self.hashing_service.hash_file(file_path))

    async def select_document(
        self, content: bytes, *, name: str, media_type: str | None = None
    ) -> WorkflowSession:
        return await self._select(
            name, lambda: self.hashing_service.hash_bytes(content, name=name, media_type=media_type)
        )

    async def register(self) -> WorkflowSession:
        return await self._run_action(WorkflowAction.REGISTER)

    async def verify(self) -> WorkflowSession:
        return await self._run_action(WorkflowAction.VERIFY)

    async def _select(
        self, filename: str, compute: Callable[[], Awaitable[HashedDocument]]
    ) -> WorkflowSession:
        # Any selection discards every earlier digest and result.
        self.clear_selection()
        generation = self._session.generation
        self._session = self._session.evolve(phase=WorkflowPhase.HASHING, status=hashing_status(filename))
        logger.info("Hashing started", generation=generation, filename=filename)

        try:
            hashed = await compute()
        except DocumentIntegrityError as exc:
            return self._fail(generation, None, exc)
        except Exception as exc:
            logger.exception("Unexpected hashing error", generation=generation, filename=filename)
            error = HashComputationError(f"Cannot hash {filename}: {exc}")
            error.__cause__ = exc
            return self._fail(generation, None, error)

        if self._is_stale(generation, "hash"):
            return self._session
        self._session = self._session.evolve(
            phase=WorkflowPhase.HASH_READY,
            status=hash_ready_status(hashed.digest),
            descriptor=hashed.descriptor,
            digest=hashed.digest,
        )
        logger.info("Hash ready", generation=generation, filename=filename, digest=hashed.digest)
        return self._session

    async def _run_action(self, action: WorkflowAction) -> WorkflowSession:
        session = self._session
        digest, descriptor = self._ensure_can_act(session, action)
        generation = session.generation

        self._session = session.evolve(
            phase=WorkflowPhase.REGISTERING if action is WorkflowAction.REGISTER else WorkflowPhase.VERIFYING,
            status=in_flight_status(action),
            action=action,
            receipt=None,
            verification=None,
            error=None,
        )
        logger.info("Action started", action=action.value, generation=generation, digest=digest)

        outcome: Any
        try:
            if action is WorkflowAction.REGISTER:
                outcome = await self.verification_client.register(digest, descriptor, self.uploader_id)
            else:
                outcome = await self.verification_client.verify(digest)
        except DocumentIntegrityError as exc:
            return self._fail(generation, action, exc)
        except Exception as exc:
            logger.exception("Unexpected verification client error", action=action.value, generation=generation)
            error = RequestError(f"Unexpected error: {exc}")
            error.__cause__ = exc
            return self._fail(generation, action, error)

        if self._is_stale(generation, action.value):
            return self._session
        if action is WorkflowAction.REGISTER:
            self._session = self._session.evolve(
                phase=WorkflowPhase.SETTLED,
                status=registered_status(outcome),
                receipt=outcome,
            )
        else:
            self._session = self._session.evolve(
                phase=WorkflowPhase.SETTLED,
                status=verdict_status(outcome.verdict),
                verification=outcome,
            )
        logger.info(
            "Action settled",
            action=action.value,
            generation=generation,
            status_kind=self._session.status.kind.value,
        )
        return self._session

    def _ensure_can_act(
        self, session: WorkflowSession, action: WorkflowAction
    ) -> tuple[str, FileDescriptor]:
        if session.in_flight:
            logger.error("Action rejected while busy", action=action.value, phase=session.phase.value)
            raise StateContractViolation(f"Cannot {action.value} while {session.phase.value} is in progress")
        if not session.digest or session.descriptor is None:
            logger.error("Action rejected without digest", action=action.value, phase=session.phase.value)
            raise StateContractViolation(f"Cannot {action.value} before a document hash is ready")
        return session.digest, session.descriptor

    def _fail(
        self, generation: int, action: WorkflowAction | None, error: DocumentIntegrityError
    ) -> WorkflowSession:
        stage = action.value if action else "hash"
        if self._is_stale(generation, stage):
            return self._session
        self._session = self._session.evolve(
            phase=WorkflowPhase.FAILED,
            status=failure_status(action, error),
            error=error,
        )
        logger.warning("Stage failed", stage=stage, generation=generation, error=error.message)
        return self._session

    def _is_stale(self, generation: int, stage: str) -> bool:
        if self._session.generation == generation:
            return False
        logger.info(
            "Discarding stale result",
            stage=stage,
            result_generation=generation,
            current_generation=self._session.generation,
        )
        return True


def build_controller(
    http_client: httpx.AsyncClient,
    *,
    base_url: str | None = None,
    uploader_id: str | None = None,
) -> IntegrityWorkflowController:
    return IntegrityWorkflowController(
        hashing_service=HashingService(),
        verification_client=VerificationServiceClient(http_client, base_url=base_url),
        uploader_id=uploader_id,
    )
