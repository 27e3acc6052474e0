"""
Configuration management for the application.
Loads settings from environment variables and the project .env file.
"""

from pathlib import Path
from typing import List
from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from loguru import logger

# Find project root (where .env and data/ live)
# This file is at chatrix/config/settings.py, so project root is 3 levels up
_project_root = Path(__file__).resolve().parent.parent.parent

PROJECT_ROOT = _project_root

# Load environment variables from project root
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(dotenv_path=_env_file, override=True)
    logger.debug(f"Loaded .env from: {_env_file}")
else:
    logger.debug(f".env file not found at: {_env_file}")
    load_dotenv(override=False)


class Settings(BaseSettings):
    """Application settings from environment variables."""

    # Completion Provider Selection
    llm_provider: str = Field(default="groq")  # Options: "groq" | "openai"

    # API Keys
    groq_api_key: str = Field(default="")
    openai_api_key: str = Field(default="")

    # Provider endpoints (both are OpenAI-compatible)
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1")
    openai_base_url: str = Field(default="")

    # Generation parameters tuned for short chat-style replies
    ai_model: str = Field(default="llama-3.1-8b-instant")
    ai_temperature: float = Field(default=0.7)
    ai_top_p: float = Field(default=0.9)
    ai_max_tokens: int = Field(default=384)
    ai_request_timeout: float = Field(default=30.0)  # Outer timeout in front of the gateway (seconds)
    ai_history_limit: int = Field(default=20)  # Max history entries forwarded to the provider

    # Synthetic participant
    assistant_name: str = Field(default="Chatrix AI")

    # Rate limiting tiers (window seconds / max requests per window)
    ai_burst_window: int = Field(default=3)
    ai_burst_limit: int = Field(default=1)
    ai_minute_window: int = Field(default=60)
    ai_minute_limit: int = Field(default=10)
    ai_daily_window: int = Field(default=24 * 60 * 60)
    ai_daily_limit: int = Field(default=50)
    rate_limit_storage_uri: str = Field(default="memory://")  # limits storage; "redis://host:6379" to share across instances
    trust_proxy: bool = Field(default=False)  # Use first X-Forwarded-For hop as network identity
    ipv6_subnet: int = Field(default=56)  # IPv6 callers are limited per subnet of this size

    # Server
    api_prefix: str = Field(default="/api")
    cors_origins: List[str] = Field(default=["http://localhost:5173", "http://localhost:3000"])
    log_level: str = Field(default="INFO")
    log_dir: str = Field(default="data/logs")

    # Client
    client_api_base_url: str = Field(default="http://localhost:8000/api")
    client_storage_dir: str = Field(default="data/client")
    archive_namespace: str = Field(default="ai-assistant-messages")
    archive_limit: int = Field(default=100)

    class Config:
        env_file = str(_project_root / ".env")
        env_file_encoding = "utf-8"
        extra = "allow"  # Allow extra fields from .env

    def provider_api_key(self) -> str:
        """API key for the configured provider (empty when absent)."""
        if self.llm_provider.lower() == "openai":
            return self.openai_api_key
        return self.groq_api_key


# Create global settings instance
settings = Settings()


def resolve_path(value: str) -> Path:
    """Resolve a settings path relative to the project root."""
    path = Path(value)
    if not path.is_absolute():
        path = _project_root / path
    return path
