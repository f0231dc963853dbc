import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from openai import OpenAI, APIStatusError

from app.core import config

logger = logging.getLogger(__name__)


class LLMBackendError(Exception):
    """A single backend attempt did not produce a usable reply."""


class AllBackendsFailedError(Exception):
    """No configured backend produced a reply."""


@dataclass
class AIReply:
    content: str
    label: str
    usage: Optional[dict] = None


class LLMBackend(ABC):
    """
    One chat-completions provider.

    Subclasses say where to send requests and which key gates them.
    Registering a new subclass in BACKENDS is all it takes to add a provider.
    """

    name = ""
    base_url = ""

    @abstractmethod
    def api_key(self) -> Optional[str]:
        ...

    @abstractmethod
    def model(self) -> str:
        ...

    @abstractmethod
    def label(self) -> str:
        ...

    def extra_headers(self) -> dict:
        return {}

    def is_configured(self) -> bool:
        return bool(self.api_key())

    def complete(self, conversation: List[dict]) -> AIReply:
        """
        Sends the conversation in one bounded request, without retries.
        Raises LLMBackendError on any failure.
        """
        client = OpenAI(
            base_url=self.base_url,
            api_key=self.api_key(),
            timeout=config.LLM_TIMEOUT_SECONDS,
            max_retries=0,
        )

        req_params = {
            "model": self.model(),
            "messages": conversation,
            "max_tokens": config.LLM_MAX_TOKENS,
            "temperature": config.LLM_TEMPERATURE,
            "presence_penalty": config.LLM_PRESENCE_PENALTY,
            "frequency_penalty": config.LLM_FREQUENCY_PENALTY,
        }
        headers = self.extra_headers()
        if headers:
            req_params["extra_headers"] = headers

        try:
            completion = client.chat.completions.create(**req_params)
        except APIStatusError as e:
            raise LLMBackendError(f"HTTP {e.status_code}: {e.message}") from e
        except Exception as e:
            raise LLMBackendError(str(e)) from e

        if not completion.choices:
            raise LLMBackendError("No completion choices returned")
        content = completion.choices[0].message.content
        if not content:
            raise LLMBackendError("Completion has no message content")

        usage = completion.usage.model_dump() if completion.usage is not None else None
        return AIReply(content=content, label=self.label(), usage=usage)


class OpenAIBackend(LLMBackend):
    name = "openai"
    base_url = config.OPENAI_BASE_URL

    def api_key(self) -> Optional[str]:
        return config.OPENAI_API_KEY

    def model(self) -> str:
        return config.OPENAI_MODEL

    def label(self) -> str:
        return f"OpenAI {_pretty_model(self.model())}"


class OpenRouterBackend(LLMBackend):
    name = "openrouter"
    base_url = config.OPENROUTER_BASE_URL

    def api_key(self) -> Optional[str]:
        return config.OPENROUTER_API_KEY

    def model(self) -> str:
        return config.OPENROUTER_MODEL

    def label(self) -> str:
        return f"OpenRouter {_pretty_model(self.model())}"

    def extra_headers(self) -> dict:
        return {
            "HTTP-Referer": config.FRONTEND_URL,
            "X-Title": config.APP_NAME,
        }


def _pretty_model(model: str) -> str:
    # "openai/gpt-3.5-turbo" -> "GPT-3.5-turbo"
    short = model.split("/")[-1]
    if short.startswith("gpt-"):
        return "GPT-" + short[len("gpt-"):]
    return short


# Fixed fallback order.
BACKENDS: List[LLMBackend] = [OpenAIBackend(), OpenRouterBackend()]


def select_backends(preferred: Optional[str] = None, backends: Optional[List[LLMBackend]] = None) -> List[LLMBackend]:
    """
    Returns the configured backends in the order they should be attempted:
    the preferred one first (if it is configured), then the rest in registry order.
    """
    if backends is None:
        backends = BACKENDS
    configured = [b for b in backends if b.is_configured()]

    ordered = [b for b in configured if preferred and b.name == preferred.lower()]
    ordered += [b for b in configured if b not in ordered]
    return ordered


def get_ai_response(
    conversation: List[dict],
    preferred: Optional[str] = None,
    backends: Optional[List[LLMBackend]] = None,
) -> AIReply:
    """
    Tries each configured backend once, in order, and returns the first reply.
    Raises AllBackendsFailedError when none succeeds (or none is configured).
    """
    for backend in select_backends(preferred, backends):
        logger.info("Attempting to use %s API...", backend.name.upper())
        try:
            reply = backend.complete(conversation)
        except LLMBackendError as e:
            logger.error("%s API failed: %s", backend.name.upper(), e)
            continue
        logger.info("%s API successful", backend.name.upper())
        return reply

    raise AllBackendsFailedError("All LLM services are currently unavailable")
