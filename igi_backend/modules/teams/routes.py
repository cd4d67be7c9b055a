from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.modules.teams.schemas import TeamCreate, TeamLogin, RoundScoreSubmit
from igi_backend.modules.teams.service import TeamService
from igi_backend.modules.teams.export import XLSX_MEDIA_TYPE, build_teams_workbook, export_filename
from igi_backend.core.dependencies import require_admin, require_team_or_admin, check_team_access
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/teams", tags=["teams"])


def get_team_service(supabase: Client = Depends(get_supabase_admin)) -> TeamService:
    return TeamService(supabase)


@router.get("/admin/teams")
async def list_teams(
    _: SessionUser = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    """All teams with credentials (commander only)"""
    return {"success": True, "data": service.list_teams()}


@router.post("/admin/create", status_code=201)
async def create_team(
    team_data: TeamCreate,
    _: SessionUser = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    team = service.create_team(team_data)
    return {"success": True, "message": "Team created successfully", "data": team.model_dump()}


@router.delete("/admin/{team_id}")
async def delete_team(
    team_id: str,
    _: SessionUser = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    service.delete_team(team_id)
    return {"success": True, "message": "Team deleted successfully"}


@router.get("/admin/export-excel")
async def export_teams(
    _: SessionUser = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    """Download every team as an .xlsx workbook"""
    content = build_teams_workbook(service.list_teams())
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={export_filename()}"},
    )


@router.post("/admin/recalculate-ranks")
async def recalculate_ranks(
    _: SessionUser = Depends(require_admin),
    service: TeamService = Depends(get_team_service)
):
    service.recalculate_ranks()
    return {"success": True, "message": "Leaderboard updated successfully"}


@router.post("/login")
async def login_team(
    credentials: TeamLogin,
    service: TeamService = Depends(get_team_service)
):
    team = service.login_team(credentials.team_name, credentials.password)
    return {"success": True, "message": "Login successful", "data": team.model_dump()}


@router.post("/round/submit")
async def submit_round_score(
    submission: RoundScoreSubmit,
    session: SessionUser = Depends(require_team_or_admin),
    service: TeamService = Depends(get_team_service)
):
    """Record a round 1 or 2 total; each round accepts one submission per team"""
    check_team_access(submission.team_id, session)
    result = service.submit_round_score(submission.team_id, submission.round_number, submission.total_score)
    return {
        "success": True,
        "message": f"Round {submission.round_number} score submitted successfully",
        "data": result.model_dump(),
    }


@router.get("/rankings")
async def get_rankings(
    round: Optional[str] = None,
    service: TeamService = Depends(get_team_service)
):
    """Leaderboard for ?round=1|2|3, ranked teams first"""
    if round not in ("1", "2", "3"):
        raise HTTPException(status_code=400, detail="Invalid or missing round parameter. Must be 1, 2, or 3")
    round_number = int(round)
    rankings = service.get_rankings(round_number)
    return {"success": True, "round": round_number, "data": [entry.model_dump() for entry in rankings]}


@router.get("/{team_id}")
async def get_team(
    team_id: str,
    service: TeamService = Depends(get_team_service)
):
    return {"success": True, "data": service.get_team_with_ranks(team_id).model_dump()}
