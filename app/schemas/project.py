# app/schemas/project.py
from typing import List, Optional

from app.schemas.common import CamelModel, UTCDateTime

class ProjectCreateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None

class ProjectUpdateRequest(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    system_prompt: Optional[str] = None

class ProjectChatSummary(CamelModel):
    id: str
    title: str
    updated_at: UTCDateTime

class ProjectResponse(CamelModel):
    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    system_prompt: str
    created_at: UTCDateTime
    updated_at: UTCDateTime
    chat_count: Optional[int] = None
    chats: Optional[List[ProjectChatSummary]] = None

class ProjectData(CamelModel):
    project: ProjectResponse

class ProjectListData(CamelModel):
    projects: List[ProjectResponse]
