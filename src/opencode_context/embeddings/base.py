"""Base class shared by embedding backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmbeddingVector:
    """A single embedding and its length."""

    vector: list[float]
    dimension: int


class Embedding(ABC):
    """Abstract embedding backend.

    Subclasses talk to a concrete service; this class owns the text
    normalization applied before anything is sent.
    """

    #: Rough token budget per input; text is cut at ``max_tokens * 4`` chars.
    max_tokens: int = 8192

    def preprocess_text(self, text: str) -> str:
        """Normalize one input string before embedding."""
        if text == "":
            return " "
        max_chars = self.max_tokens * 4
        if len(text) > max_chars:
            return text[:max_chars]
        return text

    def preprocess_texts(self, texts: list[str]) -> list[str]:
        return [self.preprocess_text(t) for t in texts]

    @abstractmethod
    async def embed(self, text: str) -> EmbeddingVector:
        ...

    @abstractmethod
    async def embed_batch(self, texts: list[str]) -> list[EmbeddingVector]:
        ...

    @abstractmethod
    async def detect_dimension(self, sample_text: str = "test") -> int:
        ...

    @abstractmethod
    def get_dimension(self) -> int:
        ...

    @abstractmethod
    def get_provider(self) -> str:
        ...

    async def aclose(self) -> None:
        """Release network resources held by the backend."""

    async def __aenter__(self) -> Embedding:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()
