from fastapi import APIRouter, Depends
from igi_backend.database.supabase_client import get_supabase
from igi_backend.modules.mission.schemas import MissionTasksResponse
from igi_backend.modules.mission.service import MissionService
from supabase import Client

router = APIRouter(prefix="/mission", tags=["mission"])


def get_mission_service(supabase: Client = Depends(get_supabase)) -> MissionService:
    return MissionService(supabase)


@router.get("/tasks", response_model=MissionTasksResponse)
async def list_tasks(service: MissionService = Depends(get_mission_service)):
    return MissionTasksResponse(tasks=service.list_tasks())
