"""OpenCode AI embedding provider.

Talks to the OpenAI-compatible ``/embeddings`` endpoint over ``httpx``.

Environment variables:
    OPENCODE_API_KEY   used when ``api_key`` is not passed
    OPENCODE_BASE_URL  optional, override API base URL
"""

from __future__ import annotations

import logging
import os
import warnings
from dataclasses import dataclass
from typing import Any

import httpx

from ..exceptions import (
    DimensionWarning,
    EmbeddingError,
    InvalidResponseError,
    OpenCodeAPIError,
)
from .base import Embedding, EmbeddingVector

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "opencode-embed-v1"
DEFAULT_BASE_URL = "https://api.opencode.ai/v1"
DEFAULT_DIMENSION = 1536


@dataclass(frozen=True)
class ModelDescriptor:
    """Static metadata for a model served by OpenCode AI."""

    name: str
    dimension: int
    description: str


_KNOWN_MODELS: dict[str, ModelDescriptor] = {
    m.name: m
    for m in (
        ModelDescriptor(
            "opencode-embed-v1",
            1536,
            "OpenCode AI embedding model optimized for code understanding (recommended)",
        ),
        ModelDescriptor(
            "opencode-embed-large",
            3072,
            "Large OpenCode AI embedding model with enhanced performance",
        ),
        ModelDescriptor(
            "opencode-code-embed",
            1024,
            "Specialized model for code semantic search",
        ),
    )
}

# Caught around every request and re-raised as EmbeddingError.
_REQUEST_ERRORS = (httpx.HTTPError, OpenCodeAPIError, InvalidResponseError)


@dataclass(frozen=True)
class _DimensionState:
    value: int
    resolved: bool


class OpenCodeEmbedding(Embedding):
    """OpenCode AI embedding provider.

    Parameters
    ----------
    model:
        Model name.  Known models have a fixed dimension; any other name is
        treated as a custom model whose dimension is probed from the API.
    api_key:
        Bearer token.  Falls back to ``OPENCODE_API_KEY``.
    base_url:
        API root, ``/embeddings`` is appended.  Falls back to
        ``OPENCODE_BASE_URL`` and then ``https://api.opencode.ai/v1``.
    http_client:
        Optional ``httpx.AsyncClient`` to send requests with.  A client passed
        in is not closed by :meth:`aclose`.
    """

    max_tokens = 8192

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if api_key is None:
            api_key = os.environ.get("OPENCODE_API_KEY", "")
        base_url = base_url or os.environ.get("OPENCODE_BASE_URL") or DEFAULT_BASE_URL

        self._model = model
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=30.0)
        self._dimension = _DimensionState(DEFAULT_DIMENSION, resolved=False)

    @property
    def model_name(self) -> str:
        return self._model or DEFAULT_MODEL

    @property
    def base_url(self) -> str:
        return self._base_url

    def get_provider(self) -> str:
        return "OpenCode"

    # ------------------------------------------------------------------
    # Dimension handling
    # ------------------------------------------------------------------

    def _known_dimension(self) -> int | None:
        descriptor = _KNOWN_MODELS.get(self.model_name)
        return descriptor.dimension if descriptor else None

    def _set_dimension(self, value: int) -> None:
        if self._dimension != _DimensionState(value, resolved=True):
            logger.debug("Dimension for %s resolved to %d", self.model_name, value)
        self._dimension = _DimensionState(value, resolved=True)

    async def _resolve_dimension(self) -> int:
        known = self._known_dimension()
        if known is not None:
            self._set_dimension(known)
            return known
        if not self._dimension.resolved:
            return await self.detect_dimension()
        return self._dimension.value

    def _observe_dimension(self, value: int) -> None:
        # Table values stay authoritative for known models.
        if self._known_dimension() is None:
            self._set_dimension(value)

    async def detect_dimension(self, sample_text: str = "test") -> int:
        """Return the model's vector length, probing the API for custom models."""
        known = self._known_dimension()
        if known is not None:
            return known

        model = self.model_name
        logger.debug("Probing dimension for custom model %s", model)
        try:
            body = await self._request(self.preprocess_text(sample_text))
            vector = _first_embedding(body)
        except _REQUEST_ERRORS as exc:
            raise EmbeddingError("detect dimension", model, exc) from exc

        self._set_dimension(len(vector))
        return len(vector)

    def get_dimension(self) -> int:
        """Return the current dimension without touching the network.

        For custom models this is the default until a probe or an embedding
        call has observed a real vector; a :class:`DimensionWarning` is
        emitted in that case.
        """
        known = self._known_dimension()
        if known is not None:
            return known
        if not self._dimension.resolved:
            warnings.warn(
                f"get_dimension() called for custom model '{self.model_name}' "
                f"before detection, returning {self._dimension.value}. "
                "Call detect_dimension() first for an accurate dimension.",
                DimensionWarning,
                stacklevel=2,
            )
        return self._dimension.value

    async def set_model(self, model: str) -> None:
        """Switch model; custom models are probed once before returning."""
        self._model = model
        known = self._known_dimension()
        if known is not None:
            self._set_dimension(known)
            return
        self._dimension = _DimensionState(self._dimension.value, resolved=False)
        await self.detect_dimension()

    @staticmethod
    def list_supported_models() -> dict[str, ModelDescriptor]:
        return dict(_KNOWN_MODELS)

    @staticmethod
    def get_supported_models() -> dict[str, dict[str, Any]]:
        """Known models as plain ``{name: {"dimension", "description"}}`` dicts."""
        return {
            name: {"dimension": m.dimension, "description": m.description}
            for name, m in _KNOWN_MODELS.items()
        }

    # ------------------------------------------------------------------
    # Embedding
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> EmbeddingVector:
        processed = self.preprocess_text(text)
        await self._resolve_dimension()

        try:
            body = await self._request(processed)
            vector = _first_embedding(body)
        except _REQUEST_ERRORS as exc:
            raise EmbeddingError(
                "generate OpenCode AI embedding", self.model_name, exc
            ) from exc

        self._observe_dimension(len(vector))
        return EmbeddingVector(vector=vector, dimension=len(vector))

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingVector]:
        if not texts:
            return []
        processed = self.preprocess_texts(texts)
        await self._resolve_dimension()

        try:
            body = await self._request(processed)
            vectors = _all_embeddings(body, expected=len(processed))
        except _REQUEST_ERRORS as exc:
            raise EmbeddingError(
                "generate OpenCode AI batch embeddings", self.model_name, exc
            ) from exc

        self._observe_dimension(len(vectors[0]))
        return [EmbeddingVector(vector=v, dimension=len(v)) for v in vectors]

    async def _request(self, payload: str | list[str]) -> Any:
        url = f"{self._base_url}/embeddings"
        count = len(payload) if isinstance(payload, list) else 1
        logger.debug("POST %s (model=%s, inputs=%d)", url, self.model_name, count)

        resp = await self._client.post(
            url,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self._api_key}",
            },
            json={"model": self.model_name, "input": payload},
        )
        if not resp.is_success:
            raise OpenCodeAPIError(resp.status_code, resp.text)
        try:
            return resp.json()
        except ValueError as exc:
            raise InvalidResponseError("body is not valid JSON") from exc

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def _data_items(body: Any) -> list[Any]:
    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list) or not data:
        raise InvalidResponseError("missing or empty 'data' array")
    return data


def _embedding_of(item: Any, position: int) -> list[float]:
    embedding = item.get("embedding") if isinstance(item, dict) else None
    if not isinstance(embedding, list):
        raise InvalidResponseError(f"data[{position}] has no 'embedding' array")
    return embedding


def _first_embedding(body: Any) -> list[float]:
    return _embedding_of(_data_items(body)[0], 0)


def _all_embeddings(body: Any, *, expected: int) -> list[list[float]]:
    data = _data_items(body)
    if len(data) != expected:
        raise InvalidResponseError(f"expected {expected} embeddings, got {len(data)}")
    if all(isinstance(item, dict) and isinstance(item.get("index"), int) for item in data):
        data = sorted(data, key=lambda item: item["index"])
    return [_embedding_of(item, i) for i, item in enumerate(data)]
