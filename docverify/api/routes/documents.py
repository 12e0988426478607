from __future__ import annotations

from fastapi import APIRouter, Depends

from docverify.api.dependencies import get_registry_service
from docverify.schemas.document import RegisterRequest, RegisterResponse, VerifyRequest, VerifyResponse
from docverify.services.registry_service import RegistryService

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("/register", response_model=RegisterResponse, response_model_by_alias=True, response_model_exclude_none=True)
async def register_document(
    payload: RegisterRequest,
    registry_service: RegistryService = Depends(get_registry_service),
):
    return await registry_service.register(payload)


@router.post("/verify", response_model=VerifyResponse, response_model_by_alias=True, response_model_exclude_none=True)
async def verify_document(
    payload: VerifyRequest,
    registry_service: RegistryService = Depends(get_registry_service),
):
    return await registry_service.verify(payload.doc_hash)
