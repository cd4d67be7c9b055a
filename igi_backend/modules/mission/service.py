import logging
from typing import Dict, List

from supabase import Client

from igi_backend.data import question_bank
from igi_backend.modules.mission.schemas import MissionTask

logger = logging.getLogger(__name__)

ROUND_TITLES = {
    "round1": "Round 1: Algorithmic Reasoning",
    "round2": "Round 2: Debugging",
    "round3": "Round 3: Competitive Programming",
}


class MissionService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _round_rows(self) -> List[Dict]:
        try:
            result = self.supabase.table("rounds")\
                .select("*")\
                .order("created_at", desc=False)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.warning(f"Rounds unavailable for mission tasks: {e}")
            return []

    def list_tasks(self) -> List[MissionTask]:
        """
        One task per contest round. Rounds rows are matched to the question bank by
        creation order, so the first rounds row describes round1 and so on.
        """
        rows = self._round_rows()
        tasks = []
        for index, round_id in enumerate(question_bank.ROUND_IDS):
            row = rows[index] if index < len(rows) else {}
            tasks.append(MissionTask(
                round_id=round_id,
                title=row.get("name") or ROUND_TITLES[round_id],
                question_count=len(question_bank.get_round_questions(round_id)),
                status=row.get("status") or "pending",
                unlocked=bool(row.get("Flag")),
                timer=row.get("timer"),
            ))
        return tasks
