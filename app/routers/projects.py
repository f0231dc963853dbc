# app/routers/projects.py
import logging
from uuid import uuid4

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core import files_api
from app.core.access import get_owned_project
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.chat import Chat
from app.models.project import Project
from app.models.user import User
from app.schemas.common import Envelope
from app.schemas.project import (
    ProjectChatSummary,
    ProjectCreateRequest,
    ProjectData,
    ProjectListData,
    ProjectResponse,
    ProjectUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

PROJECT_DETAIL_CHATS = 10

def _recent_chats(db: Session, project_id: str, limit: int):
    return (
        db.query(Chat)
        .filter(Chat.project_id == project_id)
        .order_by(Chat.created_at.desc())
        .limit(limit)
        .all()
    )

@router.get("", response_model=Envelope[ProjectListData])
def list_projects(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    List the caller's projects, newest first.

    Each project carries its chat count and a summary of its latest chat.
    """
    projects = (
        db.query(Project)
        .filter(Project.user_id == current_user.id)
        .order_by(Project.created_at.desc())
        .all()
    )
    counts = dict(
        db.query(Chat.project_id, func.count(Chat.id))
        .filter(Chat.project_id.in_([p.id for p in projects]))
        .group_by(Chat.project_id)
        .all()
    ) if projects else {}

    project_responses = []
    for project in projects:
        response = ProjectResponse.model_validate(project)
        response.chat_count = counts.get(project.id, 0)
        response.chats = [ProjectChatSummary.model_validate(c) for c in _recent_chats(db, project.id, 1)]
        project_responses.append(response)

    return Envelope(data=ProjectListData(projects=project_responses))

@router.post("", response_model=Envelope[ProjectData], status_code=201)
def create_project(
    payload: ProjectCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    name = (payload.name or "").strip()
    system_prompt = (payload.system_prompt or "").strip()
    if not name or not system_prompt:
        raise HTTPException(status_code=400, detail="Name and system prompt are required")

    project = Project(
        id=str(uuid4()),
        name=name,
        description=payload.description,
        system_prompt=system_prompt,
        user_id=current_user.id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)

    return Envelope(
        message="Project created successfully",
        data=ProjectData(project=ProjectResponse.model_validate(project)),
    )

@router.get("/{project_id}", response_model=Envelope[ProjectData])
def get_project(project_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    project = get_owned_project(db, current_user, project_id)

    response = ProjectResponse.model_validate(project)
    response.chats = [
        ProjectChatSummary.model_validate(c) for c in _recent_chats(db, project.id, PROJECT_DETAIL_CHATS)
    ]
    return Envelope(data=ProjectData(project=response))

@router.put("/{project_id}", response_model=Envelope[ProjectData])
def update_project(
    project_id: str,
    payload: ProjectUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update a project. A blank name or system prompt keeps the stored value;
    the description is replaced whenever it is sent.
    """
    project = get_owned_project(db, current_user, project_id)

    project.name = (payload.name or "").strip() or project.name
    project.system_prompt = (payload.system_prompt or "").strip() or project.system_prompt
    if "description" in payload.model_fields_set:
        project.description = payload.description

    db.commit()
    db.refresh(project)

    return Envelope(
        message="Project updated successfully",
        data=ProjectData(project=ProjectResponse.model_validate(project)),
    )

@router.delete("/{project_id}", response_model=Envelope)
def delete_project(project_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Delete a project with its chats, messages and files.

    Remote copies of the project's files are removed best-effort.
    """
    project = get_owned_project(db, current_user, project_id)

    for file_record in project.files:
        if file_record.openai_file_id and files_api.is_configured():
            try:
                files_api.delete_file(file_record.openai_file_id)
            except files_api.FilesAPIError as e:
                logger.error("Failed to delete %s from Files API: %s", file_record.openai_file_id, e)

    # Cascades remove chats (and their messages) and file records.
    db.delete(project)
    db.commit()

    return Envelope(message="Project deleted successfully")
