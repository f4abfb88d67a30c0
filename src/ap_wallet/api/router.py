"""ap_wallet REST API: 2 read endpoints, both require JWT authentication.

Coins are only ever moved by the scenario, stealing and admin flows.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.database import get_db_session
from src.ap_common.enums import TransactionType
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import get_current_user, request_id_of
from src.ap_gateway.user.db_models import UserModel
from src.ap_wallet.application.schemas import BalanceResponse
from src.ap_wallet.application.service import LedgerService

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = LedgerService()


@router.get("/balance")
async def get_balance(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    user_id = str(current_user.id)
    balance = await _service.get_balance(db, user_id)
    data = BalanceResponse.from_balance(user_id, balance)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/transactions")
async def list_transactions(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    tx_type: TransactionType | None = Query(None, description="Filter by transaction type"),
) -> ApiResponse:
    data = await _service.list_transactions(
        db, str(current_user.id), cursor, limit, tx_type.value if tx_type else None
    )
    return success_response(data.model_dump(), request_id_of(request))
