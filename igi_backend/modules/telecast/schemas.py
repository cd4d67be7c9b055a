from pydantic import BaseModel
from typing import Optional


class TelecastStatus(BaseModel):
    active: bool = False
    triggeredAt: Optional[str] = None
    timestamp: Optional[int] = None
    videoPath: str


class TelecastTrigger(BaseModel):
    videoPath: Optional[str] = None


class TelecastViewed(BaseModel):
    teamId: Optional[str] = None


class TelecastViewer(BaseModel):
    id: Optional[str] = None
    team_id: str
    viewed_at: Optional[str] = None
