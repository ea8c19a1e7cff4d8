"""
Text-generation client.

Protocol used by the generation orchestrator plus a LangChain adapter over
Google Gemini chat models. Provider exceptions are translated into the
engine's exception hierarchy.

Dependencies: langchain_core, langchain_google_genai, python-dotenv
System role: Boundary between generation and the chat model provider
"""

import logging
import os
from typing import Protocol, runtime_checkable

from dotenv import load_dotenv
from langchain_core.language_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI

from study_engine.configs.llm import LLMSettings
from study_engine.core.exceptions import ConfigurationError, ProviderError, RateLimitError

load_dotenv()

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("429", "quota", "rate limit", "rate_limit", "resource_exhausted", "resource exhausted")
AUTH_MARKERS = ("api key", "api_key", "permission_denied", "unauthenticated", "401", "403")


@runtime_checkable
class TextGenerationClient(Protocol):
    """Anything that turns a prompt into response text."""

    async def generate(self, prompt: str, json_mode: bool = False) -> str: ...


def message_text(content: str | list) -> str:
    """Flatten LangChain message content (string or list of parts) into text."""
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for part in content:
        if isinstance(part, str):
            parts.append(part)
        elif isinstance(part, dict) and part.get("type", "text") == "text":
            parts.append(str(part.get("text", "")))
    return "".join(parts)


def translate_provider_error(error: Exception, provider: str) -> Exception:
    """
    Map a raw provider exception onto the engine hierarchy.

    Args:
        error: Exception raised by the chat model
        provider: Model name for error details

    Returns:
        Exception: ConfigurationError, RateLimitError or ProviderError
    """
    message = str(error) or type(error).__name__
    lowered = message.lower()
    if any(marker in lowered for marker in AUTH_MARKERS):
        return ConfigurationError(f"Provider rejected credentials: API key invalid ({message})")
    if any(marker in lowered for marker in RATE_LIMIT_MARKERS):
        return RateLimitError(f"Rate limit exceeded: {message}", provider=provider)
    return ProviderError(message, provider=provider, details={"error_type": type(error).__name__})


class LangChainTextGenerationClient:
    """TextGenerationClient backed by LangChain chat models."""

    def __init__(
        self,
        settings: LLMSettings | None = None,
        chat_model: BaseChatModel | None = None,
        json_model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize generation client.

        Models are created on first use so a client can be built without
        credentials.

        Args:
            settings: Model configuration
            chat_model: Chat model for free-text calls (Gemini when None)
            json_model: Chat model for JSON calls (Gemini in JSON mode when None)
        """
        self.settings = settings or LLMSettings()
        self._chat_model = chat_model
        self._json_model = json_model

    def _api_key(self) -> str:
        api_key = self.settings.google_api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise ConfigurationError("Gemini API key not configured", setting="LLM_GOOGLE_API_KEY")
        return api_key

    def _build_model(self, json_mode: bool) -> BaseChatModel:
        kwargs = {}
        if json_mode:
            kwargs["response_mime_type"] = "application/json"
        model = ChatGoogleGenerativeAI(
            model=self.settings.chat_model,
            temperature=self.settings.temperature,
            max_output_tokens=self.settings.max_output_tokens,
            google_api_key=self._api_key(),
            **kwargs,
        )
        logger.info(
            f"{__name__}:_build_model - Initialized {self.settings.chat_model} (json_mode={json_mode})"
        )
        return model

    def model_for(self, json_mode: bool) -> BaseChatModel:
        """Return (building if needed) the model for the requested mode."""
        if json_mode:
            if self._json_model is None:
                self._json_model = self._build_model(json_mode=True)
            return self._json_model
        if self._chat_model is None:
            self._chat_model = self._build_model(json_mode=False)
        return self._chat_model

    async def generate(self, prompt: str, json_mode: bool = False) -> str:
        """
        Send a single-turn prompt and return the response text.

        Args:
            prompt: Full prompt text
            json_mode: Request a JSON response body

        Returns:
            str: Response text

        Raises:
            ConfigurationError: Missing or rejected API key
            RateLimitError: Provider rate limit or quota exhausted
            ProviderError: Any other provider failure
        """
        model = self.model_for(json_mode)
        try:
            response = await model.ainvoke(prompt)
        except Exception as e:
            raise translate_provider_error(e, self.settings.chat_model) from e
        return message_text(response.content)
