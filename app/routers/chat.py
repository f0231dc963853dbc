# app/routers/chat.py
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.access import get_owned_chat, get_owned_project
from app.core.chatbot import handle_new_message
from app.core.database import get_db
from app.core.security import get_current_user
from app.models.chat import Chat
from app.models.message import Message
from app.models.user import User
from app.schemas.chat import (
    ChatCreateRequest,
    ChatData,
    ChatListData,
    ChatResponse,
    MessageListData,
    MessageResponse,
    SendMessageData,
    SendMessageMetadata,
    SendMessageRequest,
    TokenUsage,
)
from app.schemas.common import Envelope

router = APIRouter()

DEFAULT_CHAT_TITLE = "New Chat"

@router.post("/projects/{project_id}/chats", response_model=Envelope[ChatData], status_code=201)
def create_chat(
    project_id: str,
    payload: Optional[ChatCreateRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Create a new chat thread under one of the caller's projects.

    - **title**: optional, defaults to "New Chat".
    """
    project = get_owned_project(db, current_user, project_id)
    title = ((payload.title if payload else None) or "").strip() or DEFAULT_CHAT_TITLE

    new_chat = Chat(id=str(uuid.uuid4()), title=title, project_id=project.id)
    db.add(new_chat)
    db.commit()
    db.refresh(new_chat)

    return Envelope(data=ChatData(chat=ChatResponse.model_validate(new_chat)))

@router.get("/projects/{project_id}/chats", response_model=Envelope[ChatListData])
def list_chats(project_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    project = get_owned_project(db, current_user, project_id)
    chats = (
        db.query(Chat)
        .filter(Chat.project_id == project.id)
        .order_by(Chat.created_at.desc())
        .all()
    )
    return Envelope(data=ChatListData(chats=[ChatResponse.model_validate(c) for c in chats]))

@router.get("/chats/{chat_id}/messages", response_model=Envelope[MessageListData])
def list_messages(chat_id: str, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    chat = get_owned_chat(db, current_user, chat_id)
    messages = (
        db.query(Message)
        .filter(Message.chat_id == chat.id)
        .order_by(Message.timestamp.asc(), Message.id.asc())
        .all()
    )
    return Envelope(data=MessageListData(messages=[MessageResponse.model_validate(m) for m in messages]))

@router.post("/chats/{chat_id}/messages", response_model=Envelope[SendMessageData])
def send_message(
    chat_id: str,
    payload: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Send a user message and get the assistant's reply.

    - **content**: required, non-blank.
    - **fileIds**: optional Files API ids whose names are given to the model as context.
    - **preferredBackend**: optional backend name to try first ("openai" or "openrouter").

    Backend outages are not errors here: the reply then comes from the
    offline fallback and `metadata.backendLabel` is "fallback".
    """
    if not payload.content or not payload.content.strip():
        raise HTTPException(status_code=400, detail="Message content is required")

    chat = get_owned_chat(db, current_user, chat_id)

    result = handle_new_message(
        db,
        current_user,
        chat,
        payload.content,
        file_ids=payload.file_ids,
        preferred_backend=payload.preferred_backend,
    )

    usage = result["metadata"]["token_usage"]
    return Envelope(
        data=SendMessageData(
            user_message=MessageResponse.model_validate(result["user_message"]),
            assistant_message=MessageResponse.model_validate(result["assistant_message"]),
            metadata=SendMessageMetadata(
                backend_label=result["metadata"]["backend_label"],
                token_usage=TokenUsage.model_validate(usage) if usage else None,
            ),
        )
    )
