from .llm import (
    AIReply,
    AllBackendsFailedError,
    LLMBackend,
    LLMBackendError,
    OpenAIBackend,
    OpenRouterBackend,
    get_ai_response,
    select_backends,
)
from .fallback import FALLBACK_LABEL, build_fallback_reply
from .main import handle_new_message

__all__ = [
    "AIReply",
    "AllBackendsFailedError",
    "LLMBackend",
    "LLMBackendError",
    "OpenAIBackend",
    "OpenRouterBackend",
    "get_ai_response",
    "select_backends",
    "FALLBACK_LABEL",
    "build_fallback_reply",
    "handle_new_message",
]
