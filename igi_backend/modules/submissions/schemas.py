from pydantic import BaseModel
from typing import Any, Optional


class Round1SubmissionResponse(BaseModel):
    id: str
    team_id: str
    score: Optional[float] = None
    feedback: Optional[str] = None
    submitted_at: Optional[str] = None


class Round2SubmissionResponse(BaseModel):
    id: str
    team_id: str
    total_score: Optional[float] = None
    bug_results: Optional[Any] = None
    submitted_at: Optional[str] = None
