from fastapi import APIRouter, Depends
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.rounds.schemas import RoundUpdate, RoundResponse, ContestState
from igi_backend.modules.rounds.service import RoundService
from igi_backend.core.dependencies import require_admin
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import List

router = APIRouter(prefix="/contest", tags=["rounds"])


def get_round_service(supabase: Client = Depends(get_supabase_admin)) -> RoundService:
    return RoundService(supabase)


@router.get("/state", response_model=ContestState)
async def get_contest_state(service: RoundService = Depends(get_round_service)):
    return service.get_contest_state()


@router.get("/rounds/state", response_model=List[RoundResponse], response_model_by_alias=True)
async def get_rounds_state(service: RoundService = Depends(get_round_service)):
    """All rounds with their Flag, status and timer"""
    return service.list_rounds()


@router.patch("/rounds/{round_id}", response_model=RoundResponse, response_model_by_alias=True)
async def update_round(
    round_id: str,
    round_data: RoundUpdate,
    _: SessionUser = Depends(require_admin),
    service: RoundService = Depends(get_round_service)
):
    """Unlock/lock a round or change its status and timer (commander only)"""
    return service.update_round(round_id, round_data)
