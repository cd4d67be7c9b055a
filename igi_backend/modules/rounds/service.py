import logging
from typing import List

from fastapi import HTTPException
from supabase import Client

from igi_backend.modules.rounds.schemas import RoundUpdate, RoundResponse, ContestState

logger = logging.getLogger(__name__)


class RoundService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_rounds(self) -> List[RoundResponse]:
        """All rounds in creation order"""
        try:
            result = self.supabase.table("rounds")\
                .select("*")\
                .order("created_at", desc=False)\
                .execute()
            return [RoundResponse(**row) for row in result.data or []]
        except Exception as e:
            logger.error(f"Failed to fetch rounds state: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch rounds state: {e}")

    def get_contest_state(self) -> ContestState:
        """The first active round, or pending when nothing is running"""
        rounds = self.list_rounds()
        active = next((r for r in rounds if r.status == "active"), None)
        if active is None:
            return ContestState(currentRound=None, roundId=None, status="pending")
        return ContestState(currentRound=active.name, roundId=active.id, status="active")

    def update_round(self, round_id: str, round_data: RoundUpdate) -> RoundResponse:
        update_data = round_data.model_dump(exclude_none=True, by_alias=True)
        if not update_data:
            raise HTTPException(status_code=400, detail="No fields to update")

        logger.info(f"Updating round {round_id} with {update_data}")
        try:
            result = self.supabase.table("rounds")\
                .update(update_data)\
                .eq("id", round_id)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to update round {round_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to update round: {e}")

        if not result.data:
            raise HTTPException(status_code=404, detail="Round not found")
        return RoundResponse(**result.data[0])
