from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from igi_backend.database.supabase_client import get_supabase_admin
from igi_backend.data import question_bank
from igi_backend.modules.contest.schemas import (
    EvaluateRequest, EvaluateResponse, Round1Submit, Round2AnswerRequest, Round2Submit,
    Round3Submit, JudgeRequest, BracketUpdate
)
from igi_backend.modules.contest.service import ContestService, acknowledge_story, story_acknowledged
from igi_backend.core.dependencies import (
    get_session_id, require_admin, require_team_or_admin, check_team_access
)
from igi_backend.core.sessions import SessionUser
from supabase import Client
from typing import Optional

router = APIRouter(prefix="/contest", tags=["contest"])


def get_contest_service(supabase: Client = Depends(get_supabase_admin)) -> ContestService:
    return ContestService(supabase)


@router.get("/story-ack")
async def get_story_ack(session_id: Optional[str] = Depends(get_session_id)):
    return {"acknowledged": story_acknowledged(session_id)}


@router.post("/story-ack")
async def post_story_ack(session_id: Optional[str] = Depends(get_session_id)):
    acknowledge_story(session_id)
    return {"success": True}


# Round 1: algorithmic reasoning

@router.get("/round1/questions")
async def get_round1_questions():
    """Round 1 questions without expected answers"""
    return {"questions": [q.public_view() for q in question_bank.get_round1_questions()]}


@router.post("/round1/evaluate", response_model=EvaluateResponse)
async def evaluate_round1(
    payload: EvaluateRequest,
    service: ContestService = Depends(get_contest_service)
):
    """Score one round 1 answer with Gemini"""
    result = await service.evaluate_round1(payload.question, payload.user_answer, payload.user_id)
    return EvaluateResponse(score=result.score, analysis=result.analysis)


@router.post("/round1/submit")
async def submit_round1(
    payload: Round1Submit,
    session: SessionUser = Depends(require_team_or_admin),
    service: ContestService = Depends(get_contest_service)
):
    if payload.team_id:
        check_team_access(payload.team_id, session)
    return service.submit_round1(payload.team_id, payload.total_score, payload.submitted_at)


# Round 2: debugging

@router.get("/round2/questions")
async def get_round2_questions():
    """Round 2 snippets in every language, without the bug explanations"""
    return {"questions": [q.public_view() for q in question_bank.get_round2_questions()]}


@router.post("/round2/submit-answer")
async def submit_round2_answer(
    payload: Round2AnswerRequest,
    service: ContestService = Depends(get_contest_service)
):
    evaluation = await service.evaluate_round2(payload.question_id, payload.user_answer, payload.language)
    return evaluation.model_dump(by_alias=True)


@router.post("/round2/submit")
async def submit_round2(
    payload: Round2Submit,
    session: SessionUser = Depends(require_team_or_admin),
    service: ContestService = Depends(get_contest_service)
):
    team_id = payload.resolved_team_id
    if team_id:
        check_team_access(team_id, session)
    return service.submit_round2(team_id, payload.total_score, payload.submitted_at, payload.evaluations)


# Round 3: competitive programming

@router.get("/round3/questions")
async def get_round3_questions():
    questions = [
        {
            "id": q.id,
            "title": q.title,
            "prompt": q.prompt,
            "difficulty": q.difficulty,
            "points": q.points,
            "timeLimit": q.time_limit,
            "tags": q.tags,
            "referenceNotes": q.reference_notes,
        }
        for q in question_bank.get_round_questions("round3")
    ]
    return {"questions": questions}


@router.get("/round3/score")
async def get_round3_score(
    team_id: Optional[str] = None,
    question_id: Optional[str] = None,
    session: SessionUser = Depends(require_team_or_admin),
    service: ContestService = Depends(get_contest_service)
):
    if team_id:
        check_team_access(team_id, session)
    return {"score": service.get_round3_score(team_id, question_id)}


@router.post("/round3/submit")
async def submit_round3(
    payload: Round3Submit,
    session: SessionUser = Depends(require_team_or_admin),
    service: ContestService = Depends(get_contest_service)
):
    """Evaluate a round 3 answer; only an improved score replaces the stored one"""
    if payload.team_id:
        check_team_access(payload.team_id, session)
    saved, body = await service.submit_round3(payload.team_id, payload.question_id, payload.answer)
    if not saved:
        return JSONResponse(status_code=400, content=body)
    return body


@router.post("/round3/judge")
async def judge_duel(
    payload: JudgeRequest,
    _: SessionUser = Depends(require_admin),
    service: ContestService = Depends(get_contest_service)
):
    return service.judge_duel(
        payload.duel_id, payload.question, payload.solution_a, payload.solution_b,
        payload.team_a_id, payload.team_b_id,
    )


@router.get("/round3/bracket")
async def get_bracket(service: ContestService = Depends(get_contest_service)):
    """Seed the top 8 qualified teams into quarter finals"""
    return service.build_bracket()


@router.post("/round3/bracket/update")
async def update_bracket(
    payload: BracketUpdate,
    _: SessionUser = Depends(require_admin),
    service: ContestService = Depends(get_contest_service)
):
    return service.update_bracket(payload.duel_id, payload.winner_team_id, payload.stage)


@router.post("/admin/clear-round2")
async def clear_round2(
    _: SessionUser = Depends(require_admin),
    service: ContestService = Depends(get_contest_service)
):
    count = service.clear_round2_submissions()
    return {"success": True, "message": f"Cleared {count} Round 2 submissions", "count": count}
