from fastapi import APIRouter, Depends
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.submissions.schemas import Round1SubmissionResponse, Round2SubmissionResponse
from igi_backend.modules.submissions.service import SubmissionService
from igi_backend.core.dependencies import require_admin
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/contest/submissions", tags=["submissions"])


def get_submission_service(supabase: Client = Depends(get_supabase_admin)) -> SubmissionService:
    return SubmissionService(supabase)


@router.get("/round1", response_model=List[Round1SubmissionResponse])
async def list_round1_submissions(
    team_id: Optional[str] = None,
    _: SessionUser = Depends(require_admin),
    service: SubmissionService = Depends(get_submission_service)
):
    """Round 1 submissions, newest first, optionally for one team"""
    return service.list_round1(team_id)


@router.get("/round2", response_model=List[Round2SubmissionResponse])
async def list_round2_submissions(
    team_id: Optional[str] = None,
    _: SessionUser = Depends(require_admin),
    service: SubmissionService = Depends(get_submission_service)
):
    return service.list_round2(team_id)
