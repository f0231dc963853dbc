# app/schemas/chat.py
from typing import List, Literal, Optional

from app.schemas.common import CamelModel, UTCDateTime

class ChatCreateRequest(CamelModel):
    title: Optional[str] = None

class ChatResponse(CamelModel):
    id: str
    project_id: str
    title: str
    created_at: UTCDateTime
    updated_at: UTCDateTime

class ChatData(CamelModel):
    chat: ChatResponse

class ChatListData(CamelModel):
    chats: List[ChatResponse]

class MessageResponse(CamelModel):
    id: int
    chat_id: str
    role: Literal["user", "assistant"]
    content: str
    timestamp: UTCDateTime

class MessageListData(CamelModel):
    messages: List[MessageResponse]

class SendMessageRequest(CamelModel):
    content: Optional[str] = None
    file_ids: Optional[List[str]] = None
    preferred_backend: Optional[str] = None

class TokenUsage(CamelModel):
    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

class SendMessageMetadata(CamelModel):
    backend_label: str
    token_usage: Optional[TokenUsage] = None

class SendMessageData(CamelModel):
    user_message: MessageResponse
    assistant_message: MessageResponse
    metadata: SendMessageMetadata
