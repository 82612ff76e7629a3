"""
Configuration module for vectorchat.
Loads settings from environment variables or .env file.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from vectorchat.errors import ConfigError

# Load .env file from project root (parent of vectorchat/ directory)
_project_root = Path(__file__).parent.parent
_env_path = _project_root / ".env"
load_dotenv(_env_path)


class Config:
    """Application configuration."""

    # OpenAI settings (embeddings + chat completions)
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
    OPENAI_BASE_URL: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    OPENAI_EMBEDDING_MODEL: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")

    # Pinecone settings
    PINECONE_API_KEY: str = os.getenv("PINECONE_API_KEY", "").strip()
    PINECONE_INDEX_NAME: str = os.getenv("PINECONE_INDEX_NAME", "").strip()
    PINECONE_NAMESPACE: str = os.getenv("PINECONE_NAMESPACE", "").strip()
    PINECONE_ENVIRONMENT: str = os.getenv("PINECONE_ENVIRONMENT", "gcp-starter")
    PINECONE_PROJECT_ID: str = os.getenv("PINECONE_PROJECT_ID", "")
    PINECONE_CONTROLLER_URL: str = os.getenv("PINECONE_CONTROLLER_URL", "https://api.pinecone.io")

    # Generation settings (low temperature keeps answers close to the context)
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.3"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "1000"))
    HISTORY_WINDOW: int = int(os.getenv("HISTORY_WINDOW", "5"))

    # Retrieval settings
    RAG_TOP_K: int = int(os.getenv("RAG_TOP_K", "5"))
    RAG_SIMILARITY_THRESHOLD: float = float(os.getenv("RAG_SIMILARITY_THRESHOLD", "0.35"))

    # Connection probing
    PROBE_MAX_ATTEMPTS: int = int(os.getenv("PROBE_MAX_ATTEMPTS", "3"))
    PROBE_INITIAL_DELAY_MS: int = int(os.getenv("PROBE_INITIAL_DELAY_MS", "1000"))
    HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "30"))

    # API settings
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Settings the external settings form is allowed to change at runtime
    _UPDATABLE = (
        "OPENAI_API_KEY",
        "PINECONE_API_KEY",
        "PINECONE_INDEX_NAME",
        "PINECONE_NAMESPACE",
        "PINECONE_ENVIRONMENT",
        "PINECONE_PROJECT_ID",
    )

    @classmethod
    def update(cls, **values: str) -> None:
        """
        Update credentials and index settings at runtime.

        Values are trimmed of surrounding whitespace before being stored.

        Raises:
            ConfigError: If an unknown setting name is given.
        """
        unknown = [name for name in values if name not in cls._UPDATABLE]
        if unknown:
            raise ConfigError(f"Unknown setting(s): {', '.join(sorted(unknown))}")

        for name, value in values.items():
            setattr(cls, name, (value or "").strip())

    @classmethod
    def get_pinecone_config_error(cls) -> Optional[str]:
        """Return a helpful message naming the first missing Pinecone field, or None."""
        if not cls.PINECONE_API_KEY.strip():
            return "Pinecone API key is missing. Please configure it in settings."
        if not cls.PINECONE_INDEX_NAME.strip():
            return "Pinecone index name is missing. Please configure it in settings."
        return None

    @classmethod
    def validate_pinecone_config(cls) -> None:
        """Validate Pinecone credentials and index name."""
        error = cls.get_pinecone_config_error()
        if error:
            raise ConfigError(error)

    @classmethod
    def validate_openai_config(cls) -> None:
        """Validate the OpenAI credential."""
        if not cls.OPENAI_API_KEY.strip():
            raise ConfigError("OpenAI API key is missing. Please configure it in settings.")

    @classmethod
    def describe(cls) -> dict:
        """Summarize the active configuration without exposing credentials."""
        return {
            "openai": {
                "api_key_present": bool(cls.OPENAI_API_KEY.strip()),
                "model": cls.OPENAI_MODEL,
                "embedding_model": cls.OPENAI_EMBEDDING_MODEL,
            },
            "pinecone": {
                "api_key_present": bool(cls.PINECONE_API_KEY.strip()),
                "index_name": cls.PINECONE_INDEX_NAME,
                "namespace": cls.PINECONE_NAMESPACE or None,
                "environment": cls.PINECONE_ENVIRONMENT,
            },
            "retrieval": {
                "top_k": cls.RAG_TOP_K,
                "similarity_threshold": cls.RAG_SIMILARITY_THRESHOLD,
            },
            "generation": {
                "temperature": cls.LLM_TEMPERATURE,
                "max_tokens": cls.LLM_MAX_TOKENS,
                "history_window": cls.HISTORY_WINDOW,
            },
        }


# Singleton config instance
config = Config()
