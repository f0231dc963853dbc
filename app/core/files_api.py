# app/core/files_api.py
import logging

from openai import OpenAI

from app.core import config

logger = logging.getLogger(__name__)


class FilesAPIError(Exception):
    """A call to the external Files API failed."""


def is_configured() -> bool:
    return bool(config.OPENAI_API_KEY)


def _client() -> OpenAI:
    if not is_configured():
        raise FilesAPIError("OPENAI_API_KEY is not configured")
    return OpenAI(
        base_url=config.OPENAI_BASE_URL,
        api_key=config.OPENAI_API_KEY,
        timeout=config.FILES_API_TIMEOUT_SECONDS,
        max_retries=0,
    )


def upload_file(file_path: str, filename: str, purpose: str = config.FILES_API_PURPOSE) -> str:
    """
    Pushes a staged local file to the Files API.
    Returns the external file id.
    """
    try:
        client = _client()
        with open(file_path, "rb") as f:
            remote = client.files.create(file=(filename, f), purpose=purpose)
    except FilesAPIError:
        raise
    except Exception as e:
        logger.error("Files API upload error for %s: %s", filename, e)
        raise FilesAPIError(str(e)) from e
    return remote.id


def delete_file(openai_file_id: str) -> None:
    try:
        _client().files.delete(openai_file_id)
    except FilesAPIError:
        raise
    except Exception as e:
        raise FilesAPIError(str(e)) from e


def get_file_content(openai_file_id: str) -> str:
    try:
        response = _client().files.content(openai_file_id)
    except FilesAPIError:
        raise
    except Exception as e:
        raise FilesAPIError(str(e)) from e
    return response.text
