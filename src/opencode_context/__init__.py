"""opencode-context: OpenCode AI embeddings and OpenCode MCP config generation."""

from .embeddings import Embedding, EmbeddingVector, get_provider
from .embeddings.opencode import OpenCodeEmbedding
from .exceptions import EmbeddingError
from .mcp_config import build_config, render_config

__all__ = [
    "Embedding",
    "EmbeddingError",
    "EmbeddingVector",
    "OpenCodeEmbedding",
    "build_config",
    "get_provider",
    "render_config",
]
