from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional

EvaluationStatus = Literal["pending", "processing", "completed", "failed"]
JobStatus = Literal["pending", "running", "completed", "failed"]


def normalize_round(value: str) -> str:
    """Accept '1' or 'round1'"""
    value = str(value).strip().lower()
    if value in ("1", "2", "3"):
        value = f"round{value}"
    if value not in ("round1", "round2", "round3"):
        raise ValueError("round must be round1, round2 or round3")
    return value


class EvaluationCreate(BaseModel):
    team_id: str = Field(min_length=1)
    round: str
    question_id: str = Field(min_length=1)
    raw_answer: str

    @field_validator("round")
    @classmethod
    def check_round(cls, value: str) -> str:
        return normalize_round(value)


class EvaluationOverride(BaseModel):
    score: float = Field(ge=0, le=10)
    feedback: Optional[str] = None


class EvaluationResponse(BaseModel):
    queue_id: str
    team_id: str
    round: str
    question_id: str
    raw_answer: str
    status: EvaluationStatus = "pending"
    score: Optional[float] = None
    feedback: Optional[str] = None
    submission_time: Optional[str] = None
    retry_count: int = 0
    max_retries: int = 3
    last_error: Optional[str] = None
    next_retry_at: Optional[str] = None


class ProcessRequest(BaseModel):
    round: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)

    @field_validator("round")
    @classmethod
    def check_round(cls, value: Optional[str]) -> Optional[str]:
        return normalize_round(value) if value else None


class AIJobResponse(BaseModel):
    id: str
    type: str
    round: Optional[str] = None
    status: JobStatus = "pending"
    progress: Optional[int] = None
    error: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
