from fastapi import APIRouter, Depends, File, Form, UploadFile
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.uploads.schemas import UploadResponse
from igi_backend.modules.uploads.service import UploadService
from igi_backend.core.dependencies import require_team_or_admin, check_team_access
from igi_backend.core.sessions import SessionUser
from supabase import Client

router = APIRouter(prefix="/uploads", tags=["uploads"])


def get_upload_service(supabase: Client = Depends(get_supabase_admin)) -> UploadService:
    return UploadService(supabase)


@router.post("/create", response_model=UploadResponse, status_code=201)
async def create_upload(
    file: UploadFile = File(...),
    team_id: str = Form(...),
    session: SessionUser = Depends(require_team_or_admin),
    service: UploadService = Depends(get_upload_service)
):
    """Upload a file on behalf of a team"""
    check_team_access(team_id, session)
    return await service.upload_team_file(team_id, file)
