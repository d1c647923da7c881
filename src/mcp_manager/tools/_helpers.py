"""Helpers shared by the MCP tools: AppContext access and secret masking."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from mcp.server.fastmcp import Context

if TYPE_CHECKING:
    from mcp_manager.server import AppContext

# Key names that indicate secrets (case-insensitive substring match)
_SECRET_KEY_HINTS: frozenset[str] = frozenset(
    {
        "key",
        "secret",
        "token",
        "password",
        "passwd",
        "credential",
        "authorization",
        "auth",
        "private",
    }
)

# Value prefixes known to be secrets (provider-specific API key prefixes)
_SECRET_VALUE_PREFIXES: tuple[str, ...] = (
    "sk-",  # OpenAI, Stripe, Anthropic
    "ghp_",  # GitHub personal access token
    "github_pat_",  # GitHub fine-grained PAT
    "xoxb-",  # Slack bot token
    "glpat-",  # GitLab personal access token
    "AKIA",  # AWS access key ID
    "eyJ",  # JWT
    "Bearer ",
    "bearer ",
)

# Fallback: high-entropy strings (base64-like, 40+ chars)
_HIGH_ENTROPY_PATTERN = re.compile(r"^[A-Za-z0-9+/=_\-]{40,}$")

# Config fields whose values are name -> string maps that may carry secrets
_MASKED_FIELDS = ("env", "headers")

MASK = "***"


def get_context(ctx: Context) -> AppContext:
    """Extract AppContext from FastMCP's lifespan context.

    Raises TypeError if the lifespan context is not an AppContext instance.
    """
    from mcp_manager.server import AppContext

    app = ctx.request_context.lifespan_context
    if not isinstance(app, AppContext):
        msg = (
            f"Expected AppContext in lifespan_context, got {type(app).__name__}. "
            "Is the server configured with app_lifespan?"
        )
        raise TypeError(msg)
    return app


def looks_like_secret(key: str, value: str) -> bool:
    """Determine if a name/value pair is likely a secret.

    1. Known secret key name patterns (KEY, TOKEN, SECRET, etc.)
    2. Known provider-specific value prefixes (sk-, ghp_, xoxb-, etc.)
    3. High-entropy fallback for very long base64-like strings
    """
    key_lower = key.lower()
    if any(hint in key_lower for hint in _SECRET_KEY_HINTS):
        return True
    if value.startswith(_SECRET_VALUE_PREFIXES):
        return True
    return bool(_HIGH_ENTROPY_PATTERN.match(value))


def mask_server_config(config: dict[str, object]) -> dict[str, object]:
    """Shallow copy of a server config with secret-looking env/header values masked."""
    masked = dict(config)
    for field_name in _MASKED_FIELDS:
        values = config.get(field_name)
        if not isinstance(values, dict):
            continue
        masked[field_name] = {
            k: MASK if isinstance(v, str) and looks_like_secret(str(k), v) else v
            for k, v in values.items()
        }
    return masked


def mask_client_config(blob: dict[str, object]) -> dict[str, object]:
    """Copy of a client file with managed server entries and top-level secrets masked."""
    masked = {
        k: MASK if isinstance(v, str) and looks_like_secret(str(k), v) else v
        for k, v in blob.items()
    }
    servers = blob.get("mcpServers")
    if isinstance(servers, dict):
        masked["mcpServers"] = {
            name: mask_server_config(entry) if isinstance(entry, dict) else entry
            for name, entry in servers.items()
        }
    return masked
