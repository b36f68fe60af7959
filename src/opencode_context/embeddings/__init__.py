"""Embedding backends.

Use :func:`get_provider` to construct a backend by name.
"""

from __future__ import annotations

import importlib

from .base import Embedding, EmbeddingVector

__all__ = ["Embedding", "EmbeddingVector", "get_provider", "available_providers"]

# name -> (module, class); imported lazily on first use
_PROVIDERS: dict[str, tuple[str, str]] = {
    "opencode": ("opencode_context.embeddings.opencode", "OpenCodeEmbedding"),
}


def available_providers() -> list[str]:
    return sorted(_PROVIDERS)


def get_provider(name: str = "opencode", *, model: str | None = None, **kwargs) -> Embedding:
    """Instantiate the embedding backend registered under *name*.

    *model* overrides the backend's default model; remaining keyword
    arguments are passed to the backend constructor unchanged.
    """
    key = name.lower()
    if key not in _PROVIDERS:
        raise ValueError(
            f"Unknown embedding provider {name!r}. "
            f"Available: {', '.join(available_providers())}"
        )
    module_path, class_name = _PROVIDERS[key]
    cls = getattr(importlib.import_module(module_path), class_name)
    if model:
        kwargs["model"] = model
    return cls(**kwargs)
