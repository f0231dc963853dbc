# app/core/access.py
"""
Ownership-scoped lookups shared by the routers.

A resource that exists but belongs to someone else is reported exactly like
one that does not exist, so ids of other users' data are never confirmed.
"""
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.models.chat import Chat
from app.models.file import File as FileModel
from app.models.project import Project
from app.models.user import User


def get_owned_project(db: Session, user: User, project_id: str) -> Project:
    project = (
        db.query(Project)
        .filter(Project.id == project_id, Project.user_id == user.id)
        .first()
    )
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def get_owned_chat(db: Session, user: User, chat_id: str) -> Chat:
    chat = (
        db.query(Chat)
        .join(Project, Chat.project_id == Project.id)
        .filter(Chat.id == chat_id, Project.user_id == user.id)
        .first()
    )
    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found")
    return chat


def get_owned_file(db: Session, user: User, file_id: str) -> FileModel:
    file_record = (
        db.query(FileModel)
        .join(Project, FileModel.project_id == Project.id)
        .filter(FileModel.id == file_id, Project.user_id == user.id)
        .first()
    )
    if not file_record:
        raise HTTPException(status_code=404, detail="File not found")
    return file_record
