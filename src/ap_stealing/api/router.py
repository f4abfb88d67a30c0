"""ap_stealing REST API: steal, shield and the stealing read models."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.database import get_db_session
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import get_current_user, request_id_of
from src.ap_gateway.user.db_models import UserModel
from src.ap_stealing.application.schemas import ApplyShieldRequest
from src.ap_stealing.application.service import StealingService
from src.ap_stealing.domain.policy import SHIELD_TIERS

router = APIRouter(tags=["stealing"])
_service = StealingService()


@router.get("/scenarios/{scenario_id}/steal")
async def get_steal_info(
    scenario_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_steal_info(db, scenario_id)
    return success_response(data.model_dump(), request_id_of(request))


@router.post("/scenarios/{scenario_id}/steal")
async def steal_scenario(
    scenario_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.attempt_steal(db, scenario_id, str(current_user.id))
    resp = success_response(data.model_dump(), request_id_of(request))
    resp.message = "Scenario stolen"
    return resp


@router.post("/scenarios/{scenario_id}/shield")
async def apply_shield(
    scenario_id: str,
    body: ApplyShieldRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.apply_shield(db, scenario_id, str(current_user.id), body.tier)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/scenarios/{scenario_id}/steal-history")
async def steal_history(
    scenario_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(50, ge=1, le=200),
) -> ApiResponse:
    items = await _service.list_steal_history(db, scenario_id, limit)
    return success_response([i.model_dump() for i in items], request_id_of(request))


@router.get("/stealing/shields")
async def list_shield_tiers(request: Request) -> ApiResponse:
    tiers = [
        {
            "tier": tier_info.tier.value,
            "name": tier_info.name,
            "duration_hours": tier_info.duration_hours,
            "cost": tier_info.cost,
        }
        for tier_info in SHIELD_TIERS.values()
    ]
    return success_response(tiers, request_id_of(request))


@router.get("/stealing/stealable")
async def list_stealable(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    items = await _service.list_stealable(db, str(current_user.id), limit)
    return success_response([i.model_dump() for i in items], request_id_of(request))


@router.get("/stealing/stats")
async def my_steal_stats(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_user_stats(db, str(current_user.id))
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/stealing/leaderboard")
async def leaderboard(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    limit: int = Query(10, ge=1, le=100),
) -> ApiResponse:
    items = await _service.top_thieves(db, limit)
    return success_response([i.model_dump() for i in items], request_id_of(request))
