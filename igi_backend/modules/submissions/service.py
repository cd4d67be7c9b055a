import logging
from typing import List, Optional

from fastapi import HTTPException
from supabase import Client

from igi_backend.modules.submissions.schemas import Round1SubmissionResponse, Round2SubmissionResponse

logger = logging.getLogger(__name__)


class SubmissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _fetch(self, table: str, team_id: Optional[str]) -> list:
        try:
            query = self.supabase.table(table)\
                .select("*")\
                .order("submitted_at", desc=True)
            if team_id:
                query = query.eq("team_id", team_id)
            return query.execute().data or []
        except Exception as e:
            logger.error(f"Error fetching {table}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_round1(self, team_id: Optional[str] = None) -> List[Round1SubmissionResponse]:
        return [Round1SubmissionResponse(**row) for row in self._fetch("submissions_round1", team_id)]

    def list_round2(self, team_id: Optional[str] = None) -> List[Round2SubmissionResponse]:
        return [Round2SubmissionResponse(**row) for row in self._fetch("submissions_round2", team_id)]
