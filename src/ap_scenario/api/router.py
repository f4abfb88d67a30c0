"""ap_scenario REST API: scenarios, predictions and pool recalculation."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.ap_common.database import get_db_session
from src.ap_common.response import ApiResponse, success_response
from src.ap_gateway.auth.dependencies import get_current_user, request_id_of
from src.ap_gateway.user.db_models import UserModel
from src.ap_scenario.application.schemas import (
    CreateScenarioRequest,
    PlacePredictionRequest,
    PoolResponse,
)
from src.ap_scenario.application.service import ScenarioService

router = APIRouter(prefix="/scenarios", tags=["scenarios"])
_service = ScenarioService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_scenario(
    body: CreateScenarioRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_scenario(
        db, str(current_user.id), body.title, body.description, body.category
    )
    return success_response(data.model_dump(), request_id_of(request))


@router.get("")
async def list_scenarios(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status_filter: str | None = Query(
        None, alias="status", description="ACTIVE (default), RESOLVED, CANCELLED or ALL"
    ),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_scenarios(db, status_filter, limit)
    return success_response(data.model_dump(), request_id_of(request))


@router.get("/{scenario_id}")
async def get_scenario(
    scenario_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_scenario(db, scenario_id)
    return success_response(data.model_dump(), request_id_of(request))


@router.post("/{scenario_id}/predictions", status_code=status.HTTP_201_CREATED)
async def place_prediction(
    scenario_id: str,
    body: PlacePredictionRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.place_prediction(
        db, str(current_user.id), scenario_id, body.side, body.amount
    )
    return success_response(data.model_dump(), request_id_of(request))


@router.post("/{scenario_id}/recalculate-pools")
async def recalculate_pools(
    scenario_id: str,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    pools = await _service.recalculate_pools(db, scenario_id)
    return success_response(PoolResponse.from_snapshot(pools).model_dump(), request_id_of(request))
