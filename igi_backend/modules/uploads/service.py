import os
import re
import time
import logging
from typing import Optional

from fastapi import HTTPException, UploadFile
from supabase import Client

from igi_backend.config import settings
from igi_backend.modules.uploads.s3_storage import S3Storage
from igi_backend.modules.uploads.schemas import UploadResponse

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def safe_file_name(file_name: Optional[str]) -> str:
    name = os.path.basename(file_name or "") or "upload"
    return _UNSAFE_CHARS.sub("_", name)


class UploadService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.s3_storage = S3Storage.from_settings()

    async def upload_team_file(self, team_id: str, file: UploadFile) -> UploadResponse:
        """Store a team file in S3 when configured, otherwise in Supabase Storage"""
        if not team_id:
            raise HTTPException(status_code=400, detail="team_id is required")

        content = await file.read(MAX_UPLOAD_BYTES + 1)
        if not content:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="File too large (max 10 MB)")

        file_name = safe_file_name(file.filename)
        key = f"{team_id}/{int(time.time() * 1000)}_{file_name}"
        content_type = file.content_type or "application/octet-stream"

        if self.s3_storage:
            try:
                path = self.s3_storage.upload_team_file(team_id, key, content, content_type)
            except Exception as e:
                raise HTTPException(status_code=500, detail=f"Failed to upload to S3: {str(e)}")
            storage = "s3"
        else:
            try:
                self.supabase.storage.from_(settings.uploads_bucket).upload(
                    key,
                    content,
                    file_options={"content-type": content_type}
                )
            except Exception as e:
                logger.error(f"Supabase Storage upload failed: {str(e)}")
                raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")
            path = f"{settings.uploads_bucket}/{key}"
            storage = "supabase"

        logger.info(f"Stored upload for {team_id} at {path}")
        return UploadResponse(team_id=team_id, file_name=file_name, path=path, storage=storage, size=len(content))
