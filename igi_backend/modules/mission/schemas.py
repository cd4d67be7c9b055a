from pydantic import BaseModel
from typing import List, Optional


class MissionTask(BaseModel):
    round_id: str
    title: str
    question_count: int
    status: str = "pending"
    unlocked: bool = False
    timer: Optional[int] = None


class MissionTasksResponse(BaseModel):
    tasks: List[MissionTask]
