# app/core/config.py
import os

from dotenv import load_dotenv

load_dotenv()

APP_NAME = "Chatbot Platform"
APP_VERSION = "1.0.0"

DATABASE_URL_CONFIGURED = bool(os.getenv("DATABASE_URL"))
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./chatbot_platform.db")

# Auth
JWT_SECRET_CONFIGURED = bool(os.getenv("JWT_SECRET"))
JWT_SECRET = os.getenv("JWT_SECRET", "dev-only-secret-change-me")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
MIN_PASSWORD_LENGTH = 6

# LLM backends. Keys are looked up at call time, an unset key disables the backend.
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-3.5-turbo")

OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_MODEL = os.getenv("OPENROUTER_MODEL", "openai/gpt-3.5-turbo")

PREFERRED_LLM_BACKEND = os.getenv("PREFERRED_LLM_BACKEND")

LLM_TIMEOUT_SECONDS = 30
LLM_MAX_TOKENS = 1000
LLM_TEMPERATURE = 0.7
LLM_PRESENCE_PENALTY = 0.1
LLM_FREQUENCY_PENALTY = 0.1

CONTEXT_WINDOW_MESSAGES = 10
DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

# Files
UPLOAD_DIRECTORY = os.getenv("UPLOAD_DIRECTORY", "uploads/files")
FILES_API_TIMEOUT_SECONDS = 60
FILES_API_PURPOSE = "assistants"
MAX_FILES_PER_UPLOAD = 10
MAX_FILE_SIZE = 512 * 1024 * 1024  # Files API limit

ALLOWED_MIME_TYPES = {
    "text/plain",
    "text/markdown",
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/csv",
    "application/json",
    "text/javascript",
    "application/javascript",
    "text/typescript",
    "text/jsx",
    "text/tsx",
    "text/python",
    "text/html",
    "text/css",
    "application/x-python-code",
    "text/x-python",
}

ALLOWED_EXTENSIONS = [
    ".txt", ".md", ".pdf", ".doc", ".docx", ".csv", ".json",
    ".js", ".ts", ".tsx", ".jsx", ".py", ".html", ".css",
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
