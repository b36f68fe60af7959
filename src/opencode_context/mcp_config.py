"""OpenCode configuration snippet for the context MCP server.

Builds the ``opencode.json`` fragment that makes OpenCode launch the MCP
server as a local subprocess and forwards the relevant environment
variables to it.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

DEFAULT_PROVIDER_ID = "claude-context"
CONFIG_SCHEMA_URL = "https://opencode.ai/config.json"
MCP_COMMAND = ("npx", "-y", "@zilliz/claude-context-mcp@latest")
MCP_TIMEOUT_MS = 20000


class Inclusion(Enum):
    """When an environment variable appears in the generated config."""

    REQUIRED = "required"
    ALWAYS = "always"  # optional, but always surfaced
    IF_SET = "if_set"


@dataclass(frozen=True)
class EnvVar:
    name: str
    inclusion: Inclusion

    def emitted(self, env: Mapping[str, str]) -> bool:
        return self.inclusion is not Inclusion.IF_SET or self.name in env


ENV_VARS: tuple[EnvVar, ...] = (
    EnvVar("MILVUS_TOKEN", Inclusion.REQUIRED),
    EnvVar("MILVUS_ADDRESS", Inclusion.ALWAYS),
    EnvVar("EMBEDDING_PROVIDER", Inclusion.ALWAYS),
    EnvVar("EMBEDDING_MODEL", Inclusion.ALWAYS),
    EnvVar("OPENAI_API_KEY", Inclusion.IF_SET),
    EnvVar("OPENAI_BASE_URL", Inclusion.IF_SET),
    EnvVar("VOYAGEAI_API_KEY", Inclusion.IF_SET),
    EnvVar("GEMINI_API_KEY", Inclusion.IF_SET),
    EnvVar("GEMINI_BASE_URL", Inclusion.IF_SET),
    EnvVar("OLLAMA_MODEL", Inclusion.IF_SET),
    EnvVar("OLLAMA_HOST", Inclusion.IF_SET),
    EnvVar("CUSTOM_EXTENSIONS", Inclusion.IF_SET),
    EnvVar("CUSTOM_IGNORE_PATTERNS", Inclusion.IF_SET),
    EnvVar("HYBRID_MODE", Inclusion.IF_SET),
    EnvVar("EMBEDDING_BATCH_SIZE", Inclusion.IF_SET),
)


def placeholder(name: str) -> str:
    """OpenCode's variable substitution syntax, resolved by the host at startup."""
    return f"{{env:{name}}}"


def build_environment(
    env: Mapping[str, str], *, include_env_values: bool = False
) -> dict[str, str]:
    """Map each emitted variable to its real value or a placeholder."""
    environment: dict[str, str] = {}
    for var in ENV_VARS:
        if not var.emitted(env):
            continue
        if include_env_values and var.name in env:
            environment[var.name] = env[var.name]
        else:
            environment[var.name] = placeholder(var.name)
    return environment


def build_config(
    *,
    include_env_values: bool = False,
    provider_id: str = DEFAULT_PROVIDER_ID,
    include_tools_section: bool = True,
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Build the OpenCode config dict.

    Parameters
    ----------
    include_env_values:
        Inline the current values of set variables instead of
        ``{env:NAME}`` placeholders.
    provider_id:
        Key of the MCP entry under ``mcp``.
    include_tools_section:
        Also emit a ``tools`` section enabling every tool of the entry.
    env:
        Environment snapshot to read.  Defaults to a copy of ``os.environ``.
    """
    if env is None:
        env = dict(os.environ)

    environment = build_environment(env, include_env_values=include_env_values)

    mcp_entry: dict[str, Any] = {
        "type": "local",
        "command": list(MCP_COMMAND),
        "timeout": MCP_TIMEOUT_MS,
        "enabled": True,
    }
    if environment:
        mcp_entry["environment"] = environment

    config: dict[str, Any] = {
        "$schema": CONFIG_SCHEMA_URL,
        "mcp": {provider_id: mcp_entry},
    }
    if include_tools_section:
        config["tools"] = {f"{provider_id}*": True}
    return config


def render_config(
    *,
    include_env_values: bool = False,
    provider_id: str = DEFAULT_PROVIDER_ID,
    include_tools_section: bool = True,
    env: Mapping[str, str] | None = None,
) -> str:
    """Return :func:`build_config` as pretty-printed JSON (2-space indent)."""
    config = build_config(
        include_env_values=include_env_values,
        provider_id=provider_id,
        include_tools_section=include_tools_section,
        env=env,
    )
    return json.dumps(config, indent=2, ensure_ascii=False)
