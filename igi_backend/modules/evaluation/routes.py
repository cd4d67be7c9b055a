from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.evaluation.schemas import (
    EvaluationCreate, EvaluationOverride, EvaluationResponse, ProcessRequest, AIJobResponse, normalize_round
)
from igi_backend.modules.evaluation.service import EvaluationService
from igi_backend.modules.evaluation.worker import process_evaluation_queue
from igi_backend.core.dependencies import require_admin, require_team_or_admin, check_team_access
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/contest/evaluation", tags=["evaluation"])


def get_evaluation_service(supabase: Client = Depends(get_supabase_admin)) -> EvaluationService:
    return EvaluationService(supabase)


@router.post("/", response_model=EvaluationResponse, status_code=201)
@router.post("", response_model=EvaluationResponse, status_code=201, include_in_schema=False)
async def enqueue_answer(
    data: EvaluationCreate,
    session: SessionUser = Depends(require_team_or_admin),
    service: EvaluationService = Depends(get_evaluation_service)
):
    """Queue a free-text answer for AI or manual scoring"""
    check_team_access(data.team_id, session)
    return service.enqueue(data)


@router.get("/", response_model=List[EvaluationResponse])
@router.get("", response_model=List[EvaluationResponse], include_in_schema=False)
async def list_evaluations(
    status: Optional[str] = None,
    round: Optional[str] = None,
    _: SessionUser = Depends(require_admin),
    service: EvaluationService = Depends(get_evaluation_service)
):
    try:
        round_id = normalize_round(round) if round else None
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return service.list_entries(status=status, round_id=round_id)


@router.post("/process", response_model=AIJobResponse, status_code=202)
async def process_queue(
    request: ProcessRequest,
    background_tasks: BackgroundTasks,
    _: SessionUser = Depends(require_admin),
    service: EvaluationService = Depends(get_evaluation_service),
    supabase: Client = Depends(get_supabase_admin)
):
    """Start an AI scoring job over pending answers; poll /jobs/{id} for progress"""
    job = service.create_job(request.round)
    background_tasks.add_task(
        process_evaluation_queue,
        job_id=job.id,
        supabase=supabase,
        round_id=request.round,
        limit=request.limit,
    )
    return job


@router.get("/jobs", response_model=List[AIJobResponse])
async def list_jobs(
    _: SessionUser = Depends(require_admin),
    service: EvaluationService = Depends(get_evaluation_service)
):
    return service.list_jobs()


@router.get("/jobs/{job_id}", response_model=AIJobResponse)
async def get_job(
    job_id: str,
    _: SessionUser = Depends(require_admin),
    service: EvaluationService = Depends(get_evaluation_service)
):
    return service.get_job(job_id)


@router.patch("/{queue_id}", response_model=EvaluationResponse)
async def override_score(
    queue_id: str,
    data: EvaluationOverride,
    _: SessionUser = Depends(require_admin),
    service: EvaluationService = Depends(get_evaluation_service)
):
    """Manual score (0-10) and feedback; marks the entry completed"""
    return service.override(queue_id, data)
