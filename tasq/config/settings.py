"""
Application settings and configuration
"""

import os
from pathlib import Path
from dotenv import load_dotenv
from typing import Optional
from tasq.config.constants import (
    OPENAI_DEFAULT_MODEL,
    OPENAI_FALLBACK_MODEL,
    DEFAULT_STORE_PATH,
    STORE_BACKENDS,
)

# Load environment variables from .env file
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    """Application settings loaded from environment variables"""

    # OpenAI
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", OPENAI_DEFAULT_MODEL)
    OPENAI_FALLBACK_MODEL: str = os.getenv("OPENAI_FALLBACK_MODEL", OPENAI_FALLBACK_MODEL)
    OPENAI_BASE_URL: Optional[str] = os.getenv("OPENAI_BASE_URL", None)

    # Storage
    TASKS_STORE_BACKEND: str = os.getenv("TASKS_STORE_BACKEND", "json").lower()
    TASKS_STORE_PATH: str = os.getenv("TASKS_STORE_PATH", DEFAULT_STORE_PATH)

    # Application
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_DIR: Optional[str] = os.getenv("LOG_DIR", None)
    WEB_HOST: str = os.getenv("WEB_HOST", "127.0.0.1")
    WEB_PORT: int = int(os.getenv("WEB_PORT", "8000"))

    @classmethod
    def validate(cls) -> bool:
        """Validate that settings required at startup are present"""
        if cls.TASKS_STORE_BACKEND not in STORE_BACKENDS:
            raise ValueError(
                f"Unsupported TASKS_STORE_BACKEND '{cls.TASKS_STORE_BACKEND}', "
                f"expected one of: {', '.join(STORE_BACKENDS)}"
            )

        if cls.TASKS_STORE_BACKEND == "json" and not cls.TASKS_STORE_PATH:
            raise ValueError("Missing required environment variable: TASKS_STORE_PATH")

        return True

    @classmethod
    def has_classifier(cls) -> bool:
        """AI-assisted creation is only available with an API key"""
        return bool(cls.OPENAI_API_KEY)


# Global settings instance
settings = Settings()
