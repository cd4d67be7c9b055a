import hmac
import random
import string
import time
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from igi_backend.config import settings
from igi_backend.core.leaderboard_cache import leaderboard_cache
from igi_backend.modules.teams.schemas import (
    TeamCreate, TeamCreated, TeamSummary, RoundScoreResult, RankingEntry, TeamDetails
)

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_uppercase
RANKING_COLUMNS = (
    "team_id, team_name, player1_name, player2_name, rank, "
    "r1_score, r1_submission_time, r2_score, r2_submission_time"
)
ROUND_COLUMNS = {
    1: ("r1_score", "r1_submission_time"),
    2: ("r2_score", "r2_submission_time"),
}
UNRANKED = 999
ROUND3_QUALIFYING_RANK = 8
_NETWORK_ERROR_MARKERS = ("fetch failed", "enotfound", "connection", "name or service not known", "timed out")


def _to_base36(number: int) -> str:
    digits = ""
    while number:
        number, remainder = divmod(number, 36)
        digits = _BASE36[remainder] + digits
    return digits or "0"


def generate_team_id() -> str:
    """TEAM-<base36 millisecond timestamp>-<4 random base36 chars>"""
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(random.choices(_BASE36, k=4))
    return f"TEAM-{timestamp}-{suffix}"


def generate_password(team_count: int) -> str:
    """IGI-025 for the first team, then steps of 4"""
    return f"IGI-{25 + team_count * 4:03d}"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def sort_by_rank(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Rank ascending with unranked rows last, preserving database order for ties"""
    return sorted(rows, key=lambda row: (row.get("rank") is None, row.get("rank") or 0))


def _is_network_error(error: Exception) -> bool:
    message = str(error).lower()
    return any(marker in message for marker in _NETWORK_ERROR_MARKERS)


def _is_duplicate_error(error: Exception) -> bool:
    message = str(error).lower()
    return "duplicate" in message or "unique" in message or "23505" in message


class TeamService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_teams(self) -> List[Dict[str, Any]]:
        """All teams, newest first (admin view, includes credentials)"""
        try:
            result = self.supabase.table("teams")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return result.data or []
        except Exception as e:
            logger.error(f"Error fetching teams: {e}")
            if _is_network_error(e):
                raise HTTPException(status_code=503, detail="Database connection failed")
            raise HTTPException(status_code=500, detail=f"Failed to fetch teams: {e}")

    def count_teams(self) -> int:
        result = self.supabase.table("teams")\
            .select("team_id", count="exact")\
            .execute()
        if result.count is not None:
            return result.count
        return len(result.data or [])

    def create_team(self, team_data: TeamCreate) -> TeamCreated:
        """Create a team with a generated id and password"""
        full_team_name = f"{team_data.team_name.strip()}{settings.team_login_suffix}"
        try:
            existing = self.supabase.table("teams")\
                .select("team_id")\
                .eq("team_name", full_team_name)\
                .execute()
            if existing.data:
                raise HTTPException(status_code=409, detail="Team ID or Team Name already exists")

            team_count = self.count_teams()
            insert_data = {
                "team_id": generate_team_id(),
                "team_name": full_team_name,
                "player1_name": team_data.player1_name,
                "player2_name": team_data.player2_name,
                "phone_no": team_data.phone_no,
                "password": generate_password(team_count),
                "r1_score": 0,
                "r2_score": 0,
            }
            result = self.supabase.table("teams").insert(insert_data).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create team")

            team = result.data[0]
            logger.info(f"Created team {team['team_id']} ({team['team_name']})")
            return TeamCreated(team_id=team["team_id"], team_name=team["team_name"], password=team["password"])
        except HTTPException:
            raise
        except Exception as e:
            if _is_duplicate_error(e):
                raise HTTPException(status_code=409, detail="Team ID or Team Name already exists")
            logger.error(f"Error creating team: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to create team: {e}")

    def delete_team(self, team_id: str) -> bool:
        try:
            result = self.supabase.table("teams")\
                .delete()\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Team not found")
        leaderboard_cache.invalidate_all()
        return True

    def get_team_row(self, team_id: str, columns: str = "*") -> Dict[str, Any]:
        try:
            result = self.supabase.table("teams")\
                .select(columns)\
                .eq("team_id", team_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if result is None or not result.data:
            raise HTTPException(status_code=404, detail="Team not found")
        return result.data

    def login_team(self, team_name: str, password: str) -> TeamSummary:
        """Verify team credentials"""
        logger.info(f"Team login attempt for {team_name}")
        try:
            result = self.supabase.table("teams")\
                .select("team_id, team_name, player1_name, player2_name, password")\
                .eq("team_name", team_name)\
                .execute()
        except Exception as e:
            logger.error(f"Team login query failed: {e}")
            raise HTTPException(status_code=500, detail="Login failed")

        team = result.data[0] if result.data else None
        if not team or not hmac.compare_digest(str(team.get("password", "")), password):
            logger.warning(f"Team login failed for {team_name}")
            raise HTTPException(status_code=401, detail="Invalid team name or password")
        return TeamSummary(**team)

    def submit_round_score(self, team_id: str, round_number: int, total_score: float) -> RoundScoreResult:
        """Store a round 1/2 total once; later submissions are rejected"""
        if round_number not in ROUND_COLUMNS:
            raise HTTPException(status_code=400, detail="Invalid round number. Must be 1 or 2")
        if total_score < 0 or total_score > 99:
            raise HTTPException(status_code=400, detail="Score must be between 0 and 99")

        score_column, time_column = ROUND_COLUMNS[round_number]
        existing = self.get_team_row(team_id, "team_id, r1_submission_time, r2_submission_time")
        if existing.get(time_column):
            raise HTTPException(status_code=409, detail=f"Round {round_number} score already submitted")

        try:
            result = self.supabase.table("teams")\
                .update({score_column: total_score, time_column: utc_now_iso()})\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update score: {e}")
        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to update score")

        leaderboard_cache.invalidate_all()
        team = result.data[0]
        return RoundScoreResult(
            team_id=team["team_id"],
            round=round_number,
            score=team[score_column],
            submission_time=team[time_column],
        )

    def _ranking_rows(self, round_number: int) -> List[Dict[str, Any]]:
        cached = leaderboard_cache.get(round_number)
        if cached is not None:
            return cached
        try:
            result = self.supabase.table("teams")\
                .select(RANKING_COLUMNS)\
                .order("rank", desc=False, nullsfirst=False)\
                .execute()
        except Exception as e:
            logger.error(f"Error fetching rankings: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to fetch rankings: {e}")
        rows = sort_by_rank(result.data or [])
        leaderboard_cache.set(rows, round_number)
        return rows

    def get_rankings(self, round_number: int) -> List[RankingEntry]:
        """Leaderboard for a round, ordered by rank ascending with unranked teams last"""
        if round_number not in (1, 2, 3):
            raise HTTPException(status_code=400, detail="Invalid or missing round parameter. Must be 1, 2, or 3")
        rows = self._ranking_rows(round_number)

        if round_number == 3:
            entries = []
            for index, team in enumerate(rows):
                rank = team.get("rank")
                entries.append(RankingEntry(
                    rank=rank or index + 1,
                    team_id=team["team_id"],
                    team_name=team["team_name"],
                    player1_name=team.get("player1_name"),
                    player2_name=team.get("player2_name"),
                    score=(team.get("r1_score") or 0) + (team.get("r2_score") or 0),
                    r1_score=team.get("r1_score"),
                    r2_score=team.get("r2_score"),
                    qualified=(rank or UNRANKED) <= ROUND3_QUALIFYING_RANK,
                ))
            return entries

        score_column, time_column = ROUND_COLUMNS[round_number]
        return [
            RankingEntry(
                rank=team.get("rank") or UNRANKED,
                team_id=team["team_id"],
                team_name=team["team_name"],
                player1_name=team.get("player1_name"),
                player2_name=team.get("player2_name"),
                score=team.get(score_column) or 0,
                submission_time=team.get(time_column),
            )
            for team in rows
        ]

    def get_team_with_ranks(self, team_id: str) -> TeamDetails:
        team = self.get_team_row(team_id)
        r1_rank = next((t.rank for t in self.get_rankings(1) if t.team_id == team_id), None)
        r2_rank = next((t.rank for t in self.get_rankings(2) if t.team_id == team_id), None)
        fields = set(TeamDetails.model_fields) - {"r1_rank", "r2_rank"}
        data = {key: team.get(key) for key in fields}
        if data.get("created_at") is not None:
            data["created_at"] = str(data["created_at"])
        return TeamDetails(**data, r1_rank=r1_rank, r2_rank=r2_rank)

    def recalculate_ranks(self) -> Optional[Any]:
        """Run the calculate_team_ranks() database function and drop cached leaderboards"""
        logger.info("Recalculating team ranks")
        try:
            result = self.supabase.rpc("calculate_team_ranks", {}).execute()
        except Exception as e:
            logger.error(f"Error calculating team ranks: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to calculate ranks: {e}")
        leaderboard_cache.invalidate_all()
        return result.data
