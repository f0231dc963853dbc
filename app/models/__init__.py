from .base import Base
from .user import User
from .project import Project
from .chat import Chat
from .message import Message
from .file import File

__all__ = [
    "Base",
    "User",
    "Project",
    "Chat",
    "Message",
    "File",
]
