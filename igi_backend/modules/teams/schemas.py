from pydantic import BaseModel, Field
from typing import Optional


class TeamCreate(BaseModel):
    team_name: str = Field(min_length=1)
    player1_name: str = Field(min_length=1)
    player2_name: str = Field(min_length=1)
    phone_no: str = Field(min_length=1)


class TeamCreated(BaseModel):
    team_id: str
    team_name: str
    password: str  # Returned only once, at creation


class TeamLogin(BaseModel):
    team_name: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TeamSummary(BaseModel):
    team_id: str
    team_name: str
    player1_name: Optional[str] = None
    player2_name: Optional[str] = None


class RoundScoreSubmit(BaseModel):
    team_id: str = Field(min_length=1)
    round_number: int
    total_score: float


class RoundScoreResult(BaseModel):
    team_id: str
    round: int
    score: float
    submission_time: Optional[str] = None


class RankingEntry(BaseModel):
    rank: int
    team_id: str
    team_name: str
    player1_name: Optional[str] = None
    player2_name: Optional[str] = None
    score: float = 0
    submission_time: Optional[str] = None
    r1_score: Optional[float] = None
    r2_score: Optional[float] = None
    qualified: Optional[bool] = None


class TeamDetails(BaseModel):
    team_id: str
    team_name: str
    player1_name: Optional[str] = None
    player2_name: Optional[str] = None
    phone_no: Optional[str] = None
    r1_score: Optional[float] = None
    r1_submission_time: Optional[str] = None
    r1_rank: Optional[int] = None
    r2_score: Optional[float] = None
    r2_submission_time: Optional[str] = None
    r2_rank: Optional[int] = None
    round3_1_score: Optional[float] = None
    round3_2_score: Optional[float] = None
    round3_3_score: Optional[float] = None
    round3_1_timestamp: Optional[str] = None
    round3_2_timestamp: Optional[str] = None
    round3_3_timestamp: Optional[str] = None
    rank: Optional[int] = None
    created_at: Optional[str] = None
