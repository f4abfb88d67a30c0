"""Admin REST API. Every route requires role ADMIN or SUPER_ADMIN."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_admin.application.service import AdminService
from src.ap_common.database import get_db_session
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import request_id_of, require_admin
from src.ap_gateway.user.db_models import UserModel

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()


class AdjustBalanceRequest(BaseModel):
    amount: int = Field(..., description="Signed; negative debits the user")
    reason: str = Field(..., min_length=1, max_length=200)


@router.post("/scenarios/recalculate-pools")
async def recalculate_all_pools(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.recalculate_all_pools(db)
    return success_response(result, request_id_of(request))


@router.get("/ledger/reconcile")
async def reconcile_ledger(
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.reconcile_ledger(db)
    return success_response(result, request_id_of(request))


@router.post("/users/{user_id}/adjust")
async def adjust_balance(
    user_id: str,
    body: AdjustBalanceRequest,
    admin: Annotated[UserModel, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    result = await _service.adjust_balance(db, user_id, body.amount, body.reason, str(admin.id))
    return success_response(result, request_id_of(request))
