# app/schemas/file.py
from typing import List, Literal, Optional

from app.schemas.common import CamelModel, UTCDateTime

class FileResponse(CamelModel):
    id: str
    project_id: str
    filename: str
    original_name: str
    mime_type: str
    size: int
    openai_file_id: Optional[str] = None
    status: Literal["uploading", "processed", "error"]
    error_message: Optional[str] = None
    created_at: UTCDateTime

class FileUploadError(CamelModel):
    filename: str
    error: str

class FileUploadData(CamelModel):
    files: List[FileResponse]
    errors: List[FileUploadError] = []

class FileListData(CamelModel):
    files: List[FileResponse]

class FileContentData(CamelModel):
    content: str
    filename: str
    mime_type: str
