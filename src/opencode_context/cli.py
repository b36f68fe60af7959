"""CLI interface for opencode-context."""

from __future__ import annotations

import asyncio
import json
import logging

import click

from .embeddings import available_providers


def _run(coro):
    """Run an async coroutine synchronously."""
    return asyncio.run(coro)


def _provider_options(fn):
    fn = click.option(
        "--base-url", envvar="OPENCODE_BASE_URL", default=None, help="Override API base URL."
    )(fn)
    fn = click.option(
        "--api-key", envvar="OPENCODE_API_KEY", default=None, help="OpenCode AI API key."
    )(fn)
    fn = click.option(
        "--model", "-m", envvar="EMBEDDING_MODEL", default=None, help="Override embedding model."
    )(fn)
    fn = click.option(
        "--provider",
        "-p",
        type=click.Choice(available_providers(), case_sensitive=False),
        default="opencode",
        help="Embedding provider.",
    )(fn)
    return fn


@click.group()
@click.version_option(package_name="opencode-context")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """opencode-context: OpenCode AI embeddings and OpenCode MCP config."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        )


@cli.command()
@click.option(
    "--include-env-values",
    is_flag=True,
    help="Inline current environment values instead of {env:NAME} placeholders.",
)
@click.option("--provider-id", default=None, help="Key of the MCP entry.")
@click.option("--no-tools", is_flag=True, help="Omit the tools section.")
def config(include_env_values: bool, provider_id: str | None, no_tools: bool) -> None:
    """Print an OpenCode config snippet for the MCP server."""
    from .mcp_config import DEFAULT_PROVIDER_ID, render_config

    click.echo(
        render_config(
            include_env_values=include_env_values,
            provider_id=provider_id or DEFAULT_PROVIDER_ID,
            include_tools_section=not no_tools,
        )
    )


@cli.command()
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON.")
def models(json_output: bool) -> None:
    """List models with a known dimension."""
    from .embeddings.opencode import OpenCodeEmbedding

    if json_output:
        click.echo(json.dumps(OpenCodeEmbedding.get_supported_models(), indent=2))
        return
    for name, m in OpenCodeEmbedding.list_supported_models().items():
        click.echo(f"{name}  dim={m.dimension}  {m.description}")


@cli.command()
@click.argument("texts", nargs=-1, required=True)
@_provider_options
def embed(
    texts: tuple[str, ...],
    provider: str,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
) -> None:
    """Embed TEXTS and print the vectors as JSON."""
    from . import embeddings
    from .exceptions import EmbeddingError

    embedder = embeddings.get_provider(
        provider, model=model, api_key=api_key, base_url=base_url
    )

    async def _embed():
        async with embedder:
            return await embedder.embed_batch(list(texts))

    try:
        results = _run(_embed())
    except EmbeddingError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(
        json.dumps([{"dimension": r.dimension, "vector": r.vector} for r in results])
    )


@cli.command()
@_provider_options
def dimension(
    provider: str,
    model: str | None,
    api_key: str | None,
    base_url: str | None,
) -> None:
    """Print the vector dimension of the configured model."""
    from . import embeddings
    from .exceptions import EmbeddingError

    embedder = embeddings.get_provider(
        provider, model=model, api_key=api_key, base_url=base_url
    )

    async def _detect():
        async with embedder:
            return await embedder.detect_dimension()

    try:
        click.echo(_run(_detect()))
    except EmbeddingError as exc:
        raise click.ClickException(str(exc)) from exc
