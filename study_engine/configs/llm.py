"""
Model provider configuration settings.

Settings for the Google Gemini chat and embedding models used through
LangChain.

Dependencies: pydantic, pydantic_settings
System role: Text-generation and embedding provider configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from study_engine.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Chat model and embedding model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    google_api_key: str | None = Field(
        default=None,
        description="Google API key for Gemini access",
    )
    chat_model: str = Field(
        default="gemini-2.5-flash",
        description="Gemini chat model ID",
    )
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_output_tokens: int = Field(
        default=8192,
        gt=0,
        description="Output token ceiling per generation call",
    )
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1024,
        gt=0,
        description="Fixed embedding dimension for every stored vector",
    )
