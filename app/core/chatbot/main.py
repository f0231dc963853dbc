import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core import config
from app.models.base import utcnow
from app.models.chat import Chat
from app.models.file import File as FileModel
from app.models.message import Message
from app.models.project import Project
from app.models.user import User
from . import llm
from .fallback import build_fallback_reply

logger = logging.getLogger(__name__)


def build_file_context(db: Session, user: User, file_ids: Optional[List[str]]) -> str:
    """
    Short blurb naming the referenced files, appended to the system prompt.
    Only files in the user's own projects are considered.
    """
    if not file_ids:
        return ""

    try:
        files = (
            db.query(FileModel)
            .join(Project, FileModel.project_id == Project.id)
            .filter(FileModel.openai_file_id.in_(file_ids), Project.user_id == user.id)
            .all()
        )
    except Exception:
        logger.exception("Error fetching file context")
        return ""

    if not files:
        return ""

    listing = "\n".join(f"- {f.original_name} ({f.mime_type})" for f in files)
    return (
        f"\n\nContext: The user has uploaded {len(files)} file(s) for reference:\n{listing}"
        "\n\nPlease consider these files when responding to the user's question."
    )


def build_conversation(system_prompt: str, history: List[Message], content: str) -> List[dict]:
    conversation = [{"role": "system", "content": system_prompt}]
    conversation += [{"role": m.role, "content": m.content} for m in history]
    conversation.append({"role": "user", "content": content})
    return conversation


def recent_history(db: Session, chat_id: str, exclude_id: Optional[int] = None) -> List[Message]:
    """The last CONTEXT_WINDOW_MESSAGES messages of the chat, oldest first."""
    query = db.query(Message).filter(Message.chat_id == chat_id)
    if exclude_id is not None:
        query = query.filter(Message.id != exclude_id)
    latest = (
        query.order_by(Message.timestamp.desc(), Message.id.desc())
        .limit(config.CONTEXT_WINDOW_MESSAGES)
        .all()
    )
    return list(reversed(latest))


def handle_new_message(
    db: Session,
    user: User,
    chat: Chat,
    content: str,
    file_ids: Optional[List[str]] = None,
    preferred_backend: Optional[str] = None,
) -> dict:
    """
    Persist the user's message, obtain an assistant reply and persist it too.

    The user message is committed before any backend is contacted so it
    survives a failed generation. Backend failures never reach the caller:
    when every backend fails the canned fallback reply is stored instead.

    Returns a dict with:
      - "user_message": the stored user Message
      - "assistant_message": the stored assistant Message
      - "metadata": {"backend_label": str, "token_usage": dict | None}
    """
    content = content.strip()
    project = chat.project

    user_message = Message(chat_id=chat.id, role="user", content=content)
    db.add(user_message)
    db.commit()
    db.refresh(user_message)

    system_prompt = (project.system_prompt or config.DEFAULT_SYSTEM_PROMPT) + build_file_context(db, user, file_ids)
    history = recent_history(db, chat.id, exclude_id=user_message.id)
    conversation = build_conversation(system_prompt, history, content)

    try:
        reply = llm.get_ai_response(conversation, preferred=preferred_backend or config.PREFERRED_LLM_BACKEND)
    except llm.AllBackendsFailedError as e:
        logger.error("All LLM services failed: %s", e)
        reply = build_fallback_reply(content, project.system_prompt)

    assistant_message = Message(chat_id=chat.id, role="assistant", content=reply.content)
    db.add(assistant_message)
    chat.updated_at = utcnow()
    db.commit()
    db.refresh(user_message)
    db.refresh(assistant_message)

    if reply.usage:
        logger.info(
            "Token usage - Service: %s, Input: %s, Output: %s, Total: %s",
            reply.label,
            reply.usage.get("prompt_tokens"),
            reply.usage.get("completion_tokens"),
            reply.usage.get("total_tokens"),
        )

    return {
        "user_message": user_message,
        "assistant_message": assistant_message,
        "metadata": {
            "backend_label": reply.label,
            "token_usage": reply.usage,
        },
    }
