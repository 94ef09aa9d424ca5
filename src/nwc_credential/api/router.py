"""nwc_credential REST API — create, read, update, delete NWC credentials."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.nwc_common.database import get_db_session
from src.nwc_common.response import ApiResponse, success_response
from src.nwc_credential.api.dependencies import get_credential_service
from src.nwc_credential.application.schemas import (
    CreateCredentialRequest,
    CredentialResponse,
    UpdateCredentialRequest,
)
from src.nwc_credential.application.service import CredentialApplicationService

router = APIRouter(prefix="/nwc", tags=["nwc"])

Service = Annotated[CredentialApplicationService, Depends(get_credential_service)]
Session = Annotated[AsyncSession, Depends(get_db_session)]


def _respond(request: Request, data: object) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = getattr(request.state, "request_id", resp.request_id)
    return resp


@router.post("")
async def create_credential(
    body: CreateCredentialRequest,
    service: Service,
    db: Session,
    request: Request,
) -> ApiResponse:
    record = await service.create(db, body.customer_id, body.app_service, body.budget)
    return _respond(request, [CredentialResponse.from_record(record).model_dump()])


@router.get("/{customer_id}")
async def get_credentials(
    customer_id: str,
    service: Service,
    db: Session,
    request: Request,
) -> ApiResponse:
    records = await service.read(db, customer_id)
    return _respond(request, [CredentialResponse.from_record(r).model_dump() for r in records])


@router.post("/{customer_id}", status_code=status.HTTP_202_ACCEPTED)
async def update_credential(
    customer_id: str,
    body: UpdateCredentialRequest,
    service: Service,
    db: Session,
    request: Request,
) -> ApiResponse:
    record = await service.update(db, body.to_record(customer_id))
    return _respond(request, [CredentialResponse.from_record(record).model_dump()])


@router.delete("/{customer_id}/{app_service}")
async def delete_credential(
    customer_id: str,
    app_service: str,
    service: Service,
    db: Session,
    request: Request,
) -> ApiResponse:
    await service.delete(db, customer_id, app_service)
    return _respond(request, [])
