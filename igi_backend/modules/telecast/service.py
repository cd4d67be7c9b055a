import time
import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from igi_backend.config import settings
from igi_backend.modules.telecast.schemas import TelecastStatus, TelecastViewer

logger = logging.getLogger(__name__)


class TelecastService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_status(self) -> TelecastStatus:
        """Latest active broadcast; any database problem reads as 'nothing on air'"""
        try:
            result = self.supabase.table("telecast")\
                .select("*")\
                .eq("active", True)\
                .order("created_at", desc=True)\
                .limit(1)\
                .execute()
            telecast = result.data[0] if result.data else None
        except Exception as e:
            logger.warning(f"Telecast status unavailable: {e}")
            telecast = None

        if not telecast:
            return TelecastStatus(active=False, videoPath=settings.telecast_default_video)
        return TelecastStatus(
            active=bool(telecast.get("active")),
            triggeredAt=telecast.get("triggered_at"),
            timestamp=telecast.get("timestamp"),
            videoPath=telecast.get("video_path") or settings.telecast_default_video,
        )

    def _deactivate_all(self) -> None:
        self.supabase.table("telecast")\
            .update({"active": False})\
            .eq("active", True)\
            .execute()

    def trigger(self, video_path: Optional[str] = None) -> str:
        video_path = video_path or settings.telecast_default_video
        try:
            self._deactivate_all()
            result = self.supabase.table("telecast").insert({
                "active": True,
                "triggered_at": datetime.now(timezone.utc).isoformat(),
                "timestamp": int(time.time() * 1000),
                "video_path": video_path,
            }).execute()
        except Exception as e:
            logger.error(f"Error triggering telecast: {e}")
            raise HTTPException(status_code=500, detail="Failed to trigger telecast")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to trigger telecast")
        logger.info(f"Telecast triggered with {video_path}")
        return result.data[0].get("video_path") or video_path

    def clear(self) -> None:
        try:
            self._deactivate_all()
        except Exception as e:
            logger.error(f"Error clearing telecast: {e}")
            raise HTTPException(status_code=500, detail="Failed to clear telecast")

    def mark_viewed(self, team_id: Optional[str]) -> TelecastViewer:
        if not team_id:
            raise HTTPException(status_code=400, detail="Team ID is required")
        try:
            result = self.supabase.table("telecast_viewers").insert({
                "team_id": team_id,
                "viewed_at": datetime.now(timezone.utc).isoformat(),
            }).execute()
        except Exception as e:
            logger.error(f"Error marking telecast as viewed: {e}")
            raise HTTPException(status_code=500, detail="Failed to mark telecast as viewed")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to mark telecast as viewed")
        return TelecastViewer(**result.data[0])

    def list_viewers(self) -> List[TelecastViewer]:
        try:
            result = self.supabase.table("telecast_viewers")\
                .select("*")\
                .order("viewed_at", desc=True)\
                .execute()
            return [TelecastViewer(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
