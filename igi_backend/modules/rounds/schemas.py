from pydantic import BaseModel, ConfigDict, Field
from typing import Literal, Optional

RoundStatus = Literal["pending", "active", "completed"]


class RoundUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    status: Optional[RoundStatus] = None
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    flag: Optional[int] = Field(default=None, alias="Flag")
    timer: Optional[int] = None


class RoundResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    status: RoundStatus = "pending"
    description: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    flag: int = Field(default=0, alias="Flag")
    timer: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ContestState(BaseModel):
    currentRound: Optional[str] = None
    roundId: Optional[str] = None
    status: RoundStatus = "pending"
