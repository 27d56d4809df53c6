import os
import logging

logger = logging.getLogger(__name__)

class Settings:
    """Application settings loaded from environment variables."""

    # API Keys
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    PERPLEXITY_API_KEY: str = os.getenv("PERPLEXITY_API_KEY", "")

    # Models
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_COMPARE_MODEL: str = os.getenv("GEMINI_COMPARE_MODEL", "gemini-2.5-pro")
    PERPLEXITY_MODEL: str = os.getenv("PERPLEXITY_MODEL", "sonar-pro")
    PERPLEXITY_DEEP_MODEL: str = os.getenv("PERPLEXITY_DEEP_MODEL", "sonar-deep-research")
    PERPLEXITY_API_BASE: str = os.getenv("PERPLEXITY_API_BASE", "https://api.perplexity.ai")
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "300"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "")

    # Sessions
    SESSION_SECRET: str = os.getenv("SESSION_SECRET", "change-me")

    # Server
    PORT: int = int(os.getenv("PORT", "8000"))
    HOST: str = os.getenv("HOST", "0.0.0.0")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS
    ALLOWED_ORIGINS: list = [
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "http://localhost:3000").split(",")
        if origin.strip()
    ]

    @classmethod
    def validate(cls):
        """Validate required environment variables."""
        if not cls.GEMINI_API_KEY:
            raise ValueError("GEMINI_API_KEY environment variable is required")
        if not cls.PERPLEXITY_API_KEY:
            raise ValueError("PERPLEXITY_API_KEY environment variable is required")
        if not cls.DATABASE_URL:
            logger.warning("DATABASE_URL not set. Database features will be disabled.")

settings = Settings()
