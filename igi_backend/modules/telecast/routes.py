from fastapi import APIRouter, Depends
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.telecast.schemas import TelecastStatus, TelecastTrigger, TelecastViewed, TelecastViewer
from igi_backend.modules.telecast.service import TelecastService
from igi_backend.core.dependencies import require_admin
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/contest/telecast", tags=["telecast"])


def get_telecast_service(supabase: Client = Depends(get_supabase_admin)) -> TelecastService:
    return TelecastService(supabase)


@router.get("/status", response_model=TelecastStatus)
async def get_telecast_status(service: TelecastService = Depends(get_telecast_service)):
    """Polled by team dashboards to start the briefing video"""
    return service.get_status()


@router.post("/trigger")
async def trigger_telecast(
    payload: Optional[TelecastTrigger] = None,
    _: SessionUser = Depends(require_admin),
    service: TelecastService = Depends(get_telecast_service)
):
    video_path = service.trigger(payload.videoPath if payload else None)
    return {"success": True, "videoPath": video_path}


@router.post("/clear")
async def clear_telecast(
    _: SessionUser = Depends(require_admin),
    service: TelecastService = Depends(get_telecast_service)
):
    service.clear()
    return {"success": True}


@router.post("/mark-viewed")
async def mark_telecast_viewed(
    payload: TelecastViewed,
    service: TelecastService = Depends(get_telecast_service)
):
    service.mark_viewed(payload.teamId)
    return {"success": True}


@router.get("/viewers", response_model=List[TelecastViewer])
async def list_telecast_viewers(
    _: SessionUser = Depends(require_admin),
    service: TelecastService = Depends(get_telecast_service)
):
    return service.list_viewers()
