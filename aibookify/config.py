"""
AIBookify Configuration
Loads settings from environment variables
"""

import os
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# Values shipped in .env templates that mean "not configured"
PLACEHOLDER_KEYS = {"", "YOUR_API_KEY", "YOUR_PEXELS_API_KEY", "YOUR_GEOAPIFY_API_KEY"}


def configured_key(value: Optional[str]) -> Optional[str]:
    """Return the key, or None when it is empty or a template placeholder"""
    if value is None:
        return None
    value = value.strip()
    if value in PLACEHOLDER_KEYS or value.startswith("sk-your"):
        return None
    return value


class Settings:
    """Application settings loaded from environment"""

    # LLM Configuration (OpenAI if a key is set, otherwise Ollama)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")
    OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "llama3.2")
    LLM_TIMEOUT: float = float(os.getenv("LLM_TIMEOUT", "60"))

    # MongoDB Configuration
    MONGO_URI: str = os.getenv("MONGO_URI", "mongodb://127.0.0.1:27017")
    MONGO_DB: str = os.getenv("MONGO_DB", "aibookify")
    MONGO_TIMEOUT_MS: int = int(os.getenv("MONGO_TIMEOUT_MS", "5000"))

    # Redis Configuration (conversation memory)
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    USE_REDIS: bool = os.getenv("USE_REDIS", "true").lower() == "true"

    # Conversation memory
    CONTEXT_TTL_HOURS: int = int(os.getenv("CONTEXT_TTL_HOURS", "24"))
    CONTEXT_MAX_MESSAGES: int = int(os.getenv("CONTEXT_MAX_MESSAGES", "10"))
    CONTEXT_CLEANUP_INTERVAL: int = int(os.getenv("CONTEXT_CLEANUP_INTERVAL", "3600"))

    # Places (Geoapify) and images (Pexels)
    GEOAPIFY_API_KEY: str = os.getenv("GEOAPIFY_API_KEY", "")
    GEOAPIFY_BASE_URL: str = os.getenv("GEOAPIFY_BASE_URL", "https://api.geoapify.com")
    GEOAPIFY_RADIUS_METERS: int = int(os.getenv("GEOAPIFY_RADIUS_METERS", "5000"))
    PEXELS_API_KEY: str = os.getenv("PEXELS_API_KEY", "")
    PEXELS_BASE_URL: str = os.getenv("PEXELS_BASE_URL", "https://api.pexels.com/v1")
    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "5"))

    # Search
    MAX_HOTEL_RESULTS: int = int(os.getenv("MAX_HOTEL_RESULTS", "6"))
    PLACEHOLDER_IMAGE_URL: str = os.getenv(
        "PLACEHOLDER_IMAGE_URL",
        "https://images.unsplash.com/photo-1559599238-0ea6229ab6a6?q=80&w=1200&auto=format&fit=crop",
    )

    # API Configuration
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "5000"))
    API_ENV: str = os.getenv("API_ENV", "development")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Configuration
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def redis_url(self) -> str:
        """Get Redis connection URL"""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    @property
    def is_development(self) -> bool:
        return self.API_ENV == "development"

    @property
    def openai_key(self) -> Optional[str]:
        return configured_key(self.OPENAI_API_KEY)

    @property
    def geoapify_key(self) -> Optional[str]:
        return configured_key(self.GEOAPIFY_API_KEY)

    @property
    def pexels_key(self) -> Optional[str]:
        return configured_key(self.PEXELS_API_KEY)


# Global settings instance
settings = Settings()
