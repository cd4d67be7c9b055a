from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from igi_backend.grading.round3 import Round3Details


class EvaluateRequest(BaseModel):
    # Loosely typed so non-string values get a 400 with a clear message
    user_id: Optional[Any] = None
    question: Optional[Any] = None
    user_answer: Optional[Any] = None


class EvaluateResponse(BaseModel):
    score: int
    analysis: str


class Round1Submit(BaseModel):
    team_id: Optional[str] = None
    total_score: Optional[float] = None
    submitted_at: Optional[str] = None


class Round2AnswerRequest(BaseModel):
    question_id: Optional[int] = None
    user_answer: Optional[str] = None
    language: Optional[str] = None


class Round2Submit(BaseModel):
    teamId: Optional[str] = None
    team_id: Optional[str] = None
    total_score: Optional[float] = None
    submitted_at: Optional[str] = None
    evaluations: List[Dict[str, Any]] = Field(default_factory=list)

    @property
    def resolved_team_id(self) -> Optional[str]:
        return self.teamId or self.team_id


class Round3Submit(BaseModel):
    team_id: Optional[str] = None
    question_id: Optional[str] = None
    answer: Optional[str] = None


class Round3SubmitResult(BaseModel):
    success: bool = True
    score: float
    analysis: str
    improved: bool = True
    previousScore: Optional[float] = None
    details: Round3Details


class JudgeRequest(BaseModel):
    duel_id: Optional[str] = None
    question: Optional[str] = None
    solution_a: Optional[str] = None
    solution_b: Optional[str] = None
    team_a_id: Optional[str] = None
    team_b_id: Optional[str] = None


class BracketUpdate(BaseModel):
    duel_id: Optional[str] = None
    winner_team_id: Optional[str] = None
    stage: Optional[str] = None
