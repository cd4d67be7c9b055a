"""
Contest round logic: question serving, AI grading hooks and score persistence
for rounds 1-3, plus the round 3 knockout bracket.
"""
import math
import threading
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from supabase import Client

from igi_backend.core.leaderboard_cache import leaderboard_cache
from igi_backend.data import question_bank
from igi_backend.grading import round1, round2, round3
from igi_backend.grading.errors import GeminiConfigurationError, GeminiKeysExhaustedError
from igi_backend.modules.contest.schemas import Round3SubmitResult
from igi_backend.modules.teams.service import TeamService, utc_now_iso

logger = logging.getLogger(__name__)

ROUND3_QUESTION_COLUMNS = {
    "round3_1": ("r3-q1", "round3_1_score", "round3_1_timestamp"),
    "round3_2": ("r3-q2", "round3_2_score", "round3_2_timestamp"),
    "round3_3": ("r3-q3", "round3_3_score", "round3_3_timestamp"),
}
VALID_ROUND3_QUESTION_IDS = list(ROUND3_QUESTION_COLUMNS)

BRACKET_SIZE = 8
# (duel id, seed, seed) for 1v8, 4v5, 2v7, 3v6
QUARTER_FINAL_SEEDS = [("qf1", 1, 8), ("qf2", 4, 5), ("qf3", 2, 7), ("qf4", 3, 6)]
NEXT_STAGE = {"quarterFinal": "semiFinal", "semiFinal": "final"}

REMATCH_MARGIN = 10
ALL_ROWS_ID = "00000000-0000-0000-0000-000000000000"

_story_lock = threading.Lock()
_story_acks = set()


def validate_total_score(total_score: Optional[float]) -> int:
    """Round the submitted total; rounds 1 and 2 accept 0-100"""
    if total_score is None:
        raise HTTPException(status_code=400, detail="Missing required field: total_score")
    final_score = math.floor(total_score + 0.5)
    if final_score < 0 or final_score > 100:
        raise HTTPException(status_code=400, detail="Invalid score - must be between 0 and 100")
    return final_score


def determine_winner(solution_a: str, solution_b: str) -> str:
    """'A', 'B' or 'rematch' when the answers are too close to call"""
    length_a = len(solution_a.strip())
    length_b = len(solution_b.strip())
    if abs(length_a - length_b) < REMATCH_MARGIN:
        return "rematch"
    return "A" if length_a > length_b else "B"


def next_bracket_stage(stage: str) -> str:
    return NEXT_STAGE.get(stage, "complete")


def acknowledge_story(session_id: Optional[str]) -> None:
    if not session_id:
        return
    with _story_lock:
        _story_acks.add(session_id)


def story_acknowledged(session_id: Optional[str]) -> bool:
    if not session_id:
        return False
    with _story_lock:
        return session_id in _story_acks


def clear_story_acks() -> None:
    with _story_lock:
        _story_acks.clear()


class ContestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.teams = TeamService(supabase)

    # Round 1

    async def evaluate_round1(self, question: Any, user_answer: Any, user_id: Any = None) -> round1.Round1Evaluation:
        if not question or not isinstance(question, str):
            raise HTTPException(status_code=400, detail="question is required and must be a string")
        if not user_answer or not isinstance(user_answer, str):
            raise HTTPException(status_code=400, detail="user_answer is required and must be a string")

        logger.info(f"[Evaluation] Processing request for user: {user_id or 'unknown'}")
        try:
            return await round1.evaluate_answer(question, user_answer)
        except GeminiConfigurationError:
            raise HTTPException(
                status_code=500,
                detail="Configuration error: Gemini API key not configured. Please contact administrator."
            )
        except GeminiKeysExhaustedError as e:
            logger.error(f"[Evaluation] {e}")
            raise HTTPException(
                status_code=502,
                detail="Evaluation service temporarily unavailable due to rate limits. Please try again in a few moments."
            )
        except Exception as e:
            logger.error(f"[Evaluation] Controller error: {e}")
            raise HTTPException(status_code=502, detail="Failed to evaluate answer. Please try again.")

    def _store_round_total(self, team_id: str, round_number: int, final_score: int, submitted_at: Optional[str]) -> Dict[str, Any]:
        score_column = f"r{round_number}_score"
        time_column = f"r{round_number}_submission_time"
        try:
            result = self.supabase.table("teams")\
                .update({score_column: final_score, time_column: submitted_at or utc_now_iso()})\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            logger.error(f"[Round{round_number} Submit] Database error: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to save submission: {e}")

        if not result.data:
            logger.error(f"[Round{round_number} Submit] Team {team_id} not found")
            raise HTTPException(status_code=404, detail="Team not found")

        leaderboard_cache.invalidate_all()
        return result.data[0]

    def _record_submission(self, table: str, row: Dict[str, Any]) -> None:
        try:
            self.supabase.table(table).insert(row).execute()
        except Exception as e:
            # History only; the team total is already stored
            logger.error(f"Failed to record {table} row for {row.get('team_id')}: {e}")

    def submit_round1(self, team_id: Optional[str], total_score: Optional[float], submitted_at: Optional[str] = None) -> Dict[str, Any]:
        if not team_id or total_score is None:
            raise HTTPException(status_code=400, detail="Missing required fields: team_id and total_score")
        final_score = validate_total_score(total_score)
        team = self._store_round_total(team_id, 1, final_score, submitted_at)
        self._record_submission("submissions_round1", {
            "team_id": team_id,
            "score": final_score,
            "submitted_at": team.get("r1_submission_time"),
        })
        logger.info(f"[Round1] Team {team_id} submission saved. Score: {final_score}")
        return {"success": True, "message": "Round 1 submission recorded", "score": final_score, "team": team}

    # Round 2

    async def evaluate_round2(self, question_id: Optional[int], user_answer: Optional[str], language: Optional[str]) -> round2.DebuggingEvaluation:
        if not question_id or user_answer is None:
            raise HTTPException(status_code=400, detail="Missing question_id or user_answer")
        question = question_bank.get_round2_question(question_id)
        if question is None:
            raise HTTPException(status_code=404, detail="Question not found")

        selected_language = (language or "python").lower()
        return await round2.score_debugging_answer(
            question.title,
            question.description,
            question.snippet_for(selected_language),
            user_answer,
            selected_language,
        )

    def submit_round2(
        self,
        team_id: Optional[str],
        total_score: Optional[float],
        submitted_at: Optional[str] = None,
        evaluations: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        if not team_id:
            raise HTTPException(status_code=400, detail="Missing required field: teamId or team_id")
        final_score = validate_total_score(total_score)
        team = self._store_round_total(team_id, 2, final_score, submitted_at)
        self._record_submission("submissions_round2", {
            "team_id": team_id,
            "total_score": final_score,
            "bug_results": evaluations or [],
            "submitted_at": team.get("r2_submission_time"),
        })

        rankings = self.teams.get_rankings(2)
        placement = next((entry.rank for entry in rankings if entry.team_id == team_id), None)
        qualified = bool(placement) and placement <= math.ceil(len(rankings) / 2)
        logger.info(f"[Round2] Team {team_id} saved with {final_score}, placement {placement}")
        return {
            "success": True,
            "totalScore": final_score,
            "placement": placement,
            "qualified": qualified,
            "evaluations": evaluations or [],
            "message": "Round 2 submission recorded",
        }

    # Round 3

    @staticmethod
    def _round3_columns(question_id: str):
        columns = ROUND3_QUESTION_COLUMNS.get(question_id)
        if columns is None:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid question_id: {question_id}. Must be one of {', '.join(VALID_ROUND3_QUESTION_IDS)}",
            )
        return columns

    def get_round3_score(self, team_id: Optional[str], question_id: Optional[str]) -> Optional[float]:
        if not team_id or not question_id:
            raise HTTPException(status_code=400, detail="Missing team_id or question_id")
        _, score_column, _ = self._round3_columns(question_id)
        team = self.teams.get_team_row(team_id, f"team_id, {score_column}")
        return team.get(score_column)

    async def submit_round3(self, team_id: Optional[str], question_id: Optional[str], answer: Optional[str]):
        """Evaluate a round 3 answer; the stored score only ever goes up"""
        if not team_id or not question_id or answer is None:
            raise HTTPException(status_code=400, detail="Missing required fields: team_id, question_id, and answer")

        shared_id, score_column, timestamp_column = self._round3_columns(question_id)
        team = self.teams.get_team_row(
            team_id, "team_id, team_name, round3_1_score, round3_2_score, round3_3_score"
        )
        existing_score = team.get(score_column)

        question = question_bank.get_question_details("round3", shared_id)
        if question is None:
            raise HTTPException(status_code=500, detail="Question configuration error")

        evaluation = await round3.evaluate_round3_answer(question.title, question.prompt, answer, shared_id)
        new_score = evaluation.score
        logger.info(f"[Round3 Submit] {team_id} {question_id}: {new_score} (previous {existing_score})")

        if existing_score is not None and new_score <= existing_score:
            return False, {
                "error": "Score must improve",
                "message": "Your new score must be higher than your previous score to be saved.",
                "score": existing_score,
                "newScore": new_score,
                "improved": False,
                "previousScore": existing_score,
                "analysis": evaluation.analysis,
            }

        try:
            self.supabase.table("teams")\
                .update({score_column: new_score, timestamp_column: utc_now_iso()})\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            logger.error(f"[Round3 Submit] Database update error: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to save score: {e}")

        leaderboard_cache.invalidate_all()
        return True, Round3SubmitResult(
            score=new_score,
            analysis=evaluation.analysis,
            previousScore=existing_score,
            details=evaluation.details,
        )

    def judge_duel(self, duel_id, question, solution_a, solution_b, team_a_id=None, team_b_id=None) -> Dict[str, Any]:
        if not duel_id or not question or not solution_a or not solution_b:
            raise HTTPException(status_code=400, detail="Missing required fields")

        winner = determine_winner(solution_a, solution_b)
        logger.info(f"[Round3 Judge] Duel {duel_id}: winner {winner}")
        winner_team_id = None
        if winner == "A":
            winner_team_id = team_a_id
        elif winner == "B":
            winner_team_id = team_b_id
        return {
            "success": True,
            "duel_id": duel_id,
            "judgment": {
                "winner": winner,
                "confidence": "high",
                "reason": "Solution comparison completed",
            },
            "winner_team_id": winner_team_id,
        }

    def build_bracket(self) -> Dict[str, Any]:
        qualified = [entry for entry in self.teams.get_rankings(3) if entry.qualified]
        top_eight = qualified[:BRACKET_SIZE]
        if len(top_eight) < BRACKET_SIZE:
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "Not enough qualified teams",
                    "message": f"Need at least {BRACKET_SIZE} teams to start Round 3 bracket",
                    "currentCount": len(top_eight),
                },
            )

        seeded = [entry.model_dump() for entry in top_eight]
        quarter_finals = [
            {"id": duel_id, "seed1": seed1, "seed2": seed2,
             "team1": seeded[seed1 - 1], "team2": seeded[seed2 - 1], "winner": None}
            for duel_id, seed1, seed2 in QUARTER_FINAL_SEEDS
        ]
        bracket = {
            "quarterFinals": quarter_finals,
            "semiFinals": [
                {"id": "sf1", "team1": None, "team2": None, "winner": None},
                {"id": "sf2", "team1": None, "team2": None, "winner": None},
            ],
            "final": {"id": "final", "team1": None, "team2": None, "winner": None},
        }
        return {"success": True, "bracket": bracket, "topEight": seeded}

    def update_bracket(self, duel_id: Optional[str], winner_team_id: Optional[str], stage: Optional[str]) -> Dict[str, Any]:
        if not duel_id or not winner_team_id or not stage:
            raise HTTPException(status_code=400, detail="Missing required fields")
        logger.info(f"[Round3 Bracket] {stage} - Duel {duel_id}: Winner {winner_team_id}")
        return {"success": True, "message": "Bracket updated", "next_stage": next_bracket_stage(stage)}

    # Admin

    def clear_round2_submissions(self) -> int:
        logger.info("[admin/clear-round2] Clearing all Round 2 submissions")
        try:
            result = self.supabase.table("submissions_round2")\
                .delete(count="exact")\
                .gte("id", ALL_ROWS_ID)\
                .execute()
        except Exception as e:
            logger.error(f"[admin/clear-round2] Error: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to clear Round 2 data: {e}")
        count = result.count if result.count is not None else len(result.data or [])
        logger.info(f"[admin/clear-round2] Cleared {count} submissions")
        return count
