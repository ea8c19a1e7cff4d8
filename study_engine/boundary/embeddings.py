"""
Embedding client.

Protocol used by ingestion and deduplication, a Gemini embeddings wrapper
with a fixed output dimensionality, and a LangChain adapter that validates
vector dimensions.

Dependencies: langchain_core, langchain_google_genai, python-dotenv
System role: Boundary between the engine and the embedding provider
"""

import logging
import os
from typing import List, Protocol, runtime_checkable

from dotenv import load_dotenv
from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from study_engine.configs.llm import LLMSettings
from study_engine.core.exceptions import ConfigurationError, EmbeddingError

load_dotenv()

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingClient(Protocol):
    """Anything that maps text to fixed-dimension vectors."""

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: list[str]) -> list[list[float]]: ...


class FixedDimensionEmbeddings(GoogleGenerativeAIEmbeddings):
    """
    GoogleGenerativeAIEmbeddings with a fixed output dimensionality.

    Every async embed call passes the configured dimension unless the
    caller overrides it.
    """

    _output_dimensionality: int = 1024

    def __init__(
        self,
        model: str = "models/gemini-embedding-001",
        output_dimensionality: int = 1024,
        **kwargs,
    ) -> None:
        """
        Initialize embeddings with fixed output dimensionality.

        Args:
            model: Google embedding model ID
            output_dimensionality: Dimension for all embeddings
            **kwargs: Additional arguments for GoogleGenerativeAIEmbeddings
        """
        super().__init__(model=model, **kwargs)
        self._output_dimensionality = output_dimensionality
        logger.info(
            f"{__name__}:__init__ - Initialized with model={model}, "
            f"output_dimensionality={output_dimensionality}"
        )

    async def aembed_documents(
        self,
        texts: List[str],
        *,
        batch_size: int = 100,
        task_type: str | None = None,
        titles: List[str] | None = None,
        output_dimensionality: int | None = None,
    ) -> List[List[float]]:
        dim = output_dimensionality or self._output_dimensionality
        return await super().aembed_documents(
            texts,
            batch_size=batch_size,
            task_type=task_type,
            titles=titles,
            output_dimensionality=dim,
        )

    async def aembed_query(
        self,
        text: str,
        task_type: str | None = None,
        title: str | None = None,
        output_dimensionality: int | None = None,
    ) -> List[float]:
        dim = output_dimensionality or self._output_dimensionality
        return await super().aembed_query(
            text,
            task_type=task_type,
            title=title,
            output_dimensionality=dim,
        )


class LangChainEmbeddingClient:
    """EmbeddingClient over any LangChain Embeddings implementation."""

    def __init__(
        self,
        embeddings: Embeddings | None = None,
        settings: LLMSettings | None = None,
    ) -> None:
        """
        Initialize embedding client.

        Args:
            embeddings: LangChain embeddings (Gemini built on first use when None)
            settings: Embedding model and dimension configuration
        """
        self.settings = settings or LLMSettings()
        self._embeddings = embeddings

    @property
    def dimension(self) -> int:
        return self.settings.embedding_dimension

    @property
    def embeddings(self) -> Embeddings:
        if self._embeddings is None:
            api_key = self.settings.google_api_key or os.getenv("GOOGLE_API_KEY")
            if not api_key:
                raise ConfigurationError("Gemini API key not configured", setting="LLM_GOOGLE_API_KEY")
            self._embeddings = FixedDimensionEmbeddings(
                model=self.settings.embedding_model,
                output_dimensionality=self.settings.embedding_dimension,
                google_api_key=api_key,
            )
        return self._embeddings

    def _check_dimension(self, vector: list[float], index: int = 0) -> list[float]:
        if len(vector) != self.dimension:
            raise EmbeddingError(
                "Embedding dimension mismatch",
                {"expected": self.dimension, "received": len(vector), "index": index},
            )
        return list(vector)

    async def embed(self, text: str) -> list[float]:
        """
        Embed a single text.

        Raises:
            EmbeddingError: Provider failure or wrong dimension
        """
        try:
            vector = await self.embeddings.aembed_query(text)
        except ConfigurationError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Embedding failed: {e}", {"error_type": type(e).__name__}) from e
        return self._check_dimension(vector)

    async def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """
        Embed many texts in one provider call.

        Args:
            texts: Texts to embed

        Returns:
            list: One vector per text, in input order

        Raises:
            EmbeddingError: Provider failure, count mismatch or wrong dimension
        """
        if not texts:
            return []
        try:
            vectors = await self.embeddings.aembed_documents(texts)
        except ConfigurationError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Batch embedding failed: {e}", {"error_type": type(e).__name__}) from e

        if len(vectors) != len(texts):
            raise EmbeddingError(
                "Embedding count mismatch",
                {"expected": len(texts), "received": len(vectors)},
            )
        logger.info(f"{__name__}:embed_batch - Embedded {len(texts)} texts")
        return [self._check_dimension(v, i) for i, v in enumerate(vectors)]
