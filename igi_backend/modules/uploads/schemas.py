from pydantic import BaseModel


class UploadResponse(BaseModel):
    success: bool = True
    team_id: str
    file_name: str
    path: str
    storage: str  # "s3" | "supabase"
    size: int
