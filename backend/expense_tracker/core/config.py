# expense_tracker/core/config.py
# Simple env-driven settings (python-dotenv + os.getenv), one shared instance.
import os
import tempfile
from dotenv import load_dotenv

load_dotenv()


def _csv(value: str):
    return [v.strip() for v in value.split(",") if v.strip()]


class SimpleSettings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./expenses.db")
    DB_MAX_RETRIES = int(os.getenv("DB_MAX_RETRIES", "3"))

    # tokens are issued by the identity provider; we only verify them
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
    JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_TIMEOUT_SECONDS = float(os.getenv("OPENAI_TIMEOUT_SECONDS", "60"))
    OPENAI_MAX_TOKENS = int(os.getenv("OPENAI_MAX_TOKENS", "1000"))

    RECEIPT_TMP_DIR = os.getenv("RECEIPT_TMP_DIR", tempfile.gettempdir())
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"))

settings = SimpleSettings()
