import random
from typing import Optional

from app.core.chatbot.llm import AIReply

FALLBACK_LABEL = "fallback"


def build_fallback_reply(content: str, system_prompt: Optional[str] = None) -> AIReply:
    """Canned offline-mode reply used when no backend answered."""
    responses = [
        "I apologize, but I'm currently experiencing connectivity issues with my AI services. "
        "However, I can still help you based on my configuration.",
        f'Based on your question about "{content[:30]}...", I would normally provide a detailed '
        "response, but I'm currently in offline mode.",
        "Thank you for your message. I'm temporarily unable to access my full AI capabilities, "
        "but I'm still here to assist you.",
        f'I understand you\'re asking about "{content[:20]}...". While my AI services are '
        "temporarily unavailable, I can provide basic assistance.",
    ]

    reply = random.choice(responses)
    if system_prompt:
        reply += f"\n\nNote: I'm configured as: {system_prompt[:100]}..."

    return AIReply(content=reply, label=FALLBACK_LABEL, usage=None)
