import re
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException
from supabase import Client

from igi_backend.data import question_bank
from igi_backend.modules.evaluation.schemas import (
    EvaluationCreate, EvaluationOverride, EvaluationResponse, AIJobResponse
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 3
_QUESTION_NUMBER = re.compile(r"(\d+)$")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def resolve_question(round_id: str, question_id: str) -> Tuple[str, str]:
    """(question text, reference answer) for a queued answer; unknown ids fall back to the raw id"""
    match = _QUESTION_NUMBER.search(question_id or "")
    number = int(match.group(1)) if match else None

    if round_id == "round1" and number is not None:
        question = question_bank.get_round1_question(number)
        if question:
            return question.question_text, question.expected_answer
    if round_id == "round2" and number is not None:
        question = question_bank.get_round2_question(number)
        if question:
            return f"{question.title}\n{question.description}\n\n{question.code_snippet}", ""
    if round_id == "round3":
        question = question_bank.get_question_details("round3", question_id)
        if question is None and number is not None:
            question = question_bank.get_question_details("round3", f"r3-q{number}")
        if question:
            return question.prompt, question.reference_notes or ""
    return question_id, ""


class EvaluationService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    # Queue

    def enqueue(self, data: EvaluationCreate) -> EvaluationResponse:
        try:
            result = self.supabase.table("evaluation").insert({
                "team_id": data.team_id,
                "round": data.round,
                "question_id": data.question_id,
                "raw_answer": data.raw_answer,
                "status": "pending",
                "retry_count": 0,
                "max_retries": DEFAULT_MAX_RETRIES,
                "submission_time": utc_now_iso(),
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to queue answer")
            return EvaluationResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error queueing answer for {data.team_id}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    def list_entries(self, status: Optional[str] = None, round_id: Optional[str] = None) -> List[EvaluationResponse]:
        try:
            query = self.supabase.table("evaluation")\
                .select("*")\
                .order("submission_time", desc=True)
            if status:
                query = query.eq("status", status)
            if round_id:
                query = query.eq("round", round_id)
            return [EvaluationResponse(**row) for row in query.execute().data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_pending(self, round_id: Optional[str] = None, limit: int = 10) -> List[Dict[str, Any]]:
        """Oldest pending answers first"""
        query = self.supabase.table("evaluation")\
            .select("*")\
            .eq("status", "pending")
        if round_id:
            query = query.eq("round", round_id)
        result = query.order("submission_time", desc=False).limit(limit).execute()
        return result.data or []

    def _update_entry(self, queue_id: str, update_data: Dict[str, Any]) -> Dict[str, Any]:
        update_data["updated_at"] = utc_now_iso()
        result = self.supabase.table("evaluation")\
            .update(update_data)\
            .eq("queue_id", queue_id)\
            .execute()
        if not result.data:
            raise HTTPException(status_code=404, detail="Evaluation entry not found")
        return result.data[0]

    def override(self, queue_id: str, data: EvaluationOverride) -> EvaluationResponse:
        """Manual score from the commander; always wins over AI scoring"""
        try:
            row = self._update_entry(queue_id, {
                "score": data.score,
                "feedback": data.feedback,
                "status": "completed",
                "last_error": None,
            })
            logger.info(f"Evaluation {queue_id} overridden with score {data.score}")
            return EvaluationResponse(**row)
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def mark_processing(self, queue_id: str) -> Dict[str, Any]:
        return self._update_entry(queue_id, {"status": "processing"})

    def mark_completed(self, queue_id: str, score: float, feedback: Optional[str] = None) -> Dict[str, Any]:
        return self._update_entry(queue_id, {
            "status": "completed",
            "score": score,
            "feedback": feedback,
            "last_error": None,
            "next_retry_at": None,
        })

    def record_failure(self, entry: Dict[str, Any], error: str) -> Dict[str, Any]:
        """Back to pending for another pass, or failed once max_retries is reached"""
        retry_count = (entry.get("retry_count") or 0) + 1
        max_retries = entry.get("max_retries") or DEFAULT_MAX_RETRIES
        exhausted = retry_count >= max_retries
        return self._update_entry(entry["queue_id"], {
            "status": "failed" if exhausted else "pending",
            "retry_count": retry_count,
            "last_error": error,
            "next_retry_at": None if exhausted else utc_now_iso(),
        })

    # AI jobs

    def create_job(self, round_id: Optional[str] = None) -> AIJobResponse:
        try:
            result = self.supabase.table("ai_jobs").insert({
                "type": "evaluation",
                "round": round_id,
                "status": "pending",
                "progress": 0,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create AI job")
            return AIJobResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_job(self, job_id: str, update_data: Dict[str, Any]) -> None:
        update_data["updated_at"] = utc_now_iso()
        self.supabase.table("ai_jobs")\
            .update(update_data)\
            .eq("id", job_id)\
            .execute()

    def list_jobs(self) -> List[AIJobResponse]:
        try:
            result = self.supabase.table("ai_jobs")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [AIJobResponse(**row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_job(self, job_id: str) -> AIJobResponse:
        try:
            result = self.supabase.table("ai_jobs")\
                .select("*")\
                .eq("id", job_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if result is None or not result.data:
            raise HTTPException(status_code=404, detail="AI job not found")
        return AIJobResponse(**result.data)
