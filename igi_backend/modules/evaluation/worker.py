import logging
from typing import Any, Dict, Optional

from supabase import Client

from igi_backend.grading.client import GeminiClient
from igi_backend.grading.scoring import request_score
from igi_backend.modules.evaluation.service import EvaluationService, resolve_question

logger = logging.getLogger(__name__)


def release_entry(service: EvaluationService, entry: Dict[str, Any], error: str) -> None:
    """Hand a failed answer back to the retry cycle so it never stays in processing"""
    try:
        service.record_failure(entry, error)
    except Exception as e:
        logger.error(f"Could not record failure for {entry['queue_id']}: {e}")


async def process_evaluation_queue(
    job_id: str,
    supabase: Client,
    round_id: Optional[str] = None,
    limit: int = 10,
    client: Optional[GeminiClient] = None,
):
    """
    Background worker for POST /contest/evaluation/process.

    Grades pending answers one at a time with Gemini and reports progress on the
    ai_jobs row. Any per-answer failure sends that answer back to pending until its
    retries run out; only an unreadable queue fails the whole job.
    """
    service = EvaluationService(supabase)
    service.update_job(job_id, {"status": "running", "progress": 0})
    logger.info(f"[AI Job {job_id}] Started (round={round_id or 'all'}, limit={limit})")

    completed = failed = 0
    try:
        pending = service.list_pending(round_id, limit)
        total = len(pending)
        for index, entry in enumerate(pending, start=1):
            queue_id = entry["queue_id"]
            try:
                service.mark_processing(queue_id)
                question, expected_answer = resolve_question(entry.get("round"), entry.get("question_id"))
                score = await request_score(question, expected_answer, entry.get("raw_answer") or "", client)
                service.mark_completed(queue_id, score)
                completed += 1
            except Exception as e:
                logger.warning(f"[AI Job {job_id}] {queue_id} failed: {e}")
                failed += 1
                release_entry(service, entry, str(e))
            service.update_job(job_id, {"progress": int(index * 100 / total)})

        service.update_job(job_id, {"status": "completed", "progress": 100})
        logger.info(f"[AI Job {job_id}] Done: {completed} scored, {failed} failed")
    except Exception as e:
        logger.error(f"[AI Job {job_id}] Aborted: {e}")
        service.update_job(job_id, {"status": "failed", "error": str(e)})
