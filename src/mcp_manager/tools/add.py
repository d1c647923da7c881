"""add_server tool -- register a new MCP server in the central registry."""

from __future__ import annotations

import asyncio
from dataclasses import asdict

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError
from mcp_manager.models import AddServerResult
from mcp_manager.tools._helpers import get_context, mask_server_config


async def add_server(
    name: str,
    config: dict[str, object],
    ctx: Context,
) -> dict[str, object]:
    """Add an MCP server to the central registry.

    The server is appended after existing ones and is not enabled for any
    client; use toggle_client_server for that. Every field in ``config`` is
    kept and later copied verbatim into client files.

    Args:
        name: Unique server name.
        config: Server fields. Must contain exactly one of "command", "url"
            or "httpUrl". Commands must be on PATH; URLs must be http(s).
            Optional "timeout" must be >= 0 and "env" values non-empty.

    Returns:
        Result with success status, message, and the stored config
        (secrets masked).
    """
    try:
        app = get_context(ctx)
        server = await asyncio.to_thread(app.orchestrator.add_server, name, config)
        return asdict(
            AddServerResult(
                success=True,
                server_name=server.name,
                message=(
                    f"Server '{server.name}' added to {app.orchestrator.registry_path}. "
                    "Enable it per client with toggle_client_server."
                ),
                config=mask_server_config(server.config),
            )
        )
    except McpManagerError as exc:
        return asdict(AddServerResult(success=False, server_name=name, message=str(exc)))
    except Exception as exc:
        await ctx.error(f"Unexpected error in add_server: {exc}")
        return asdict(
            AddServerResult(
                success=False,
                server_name=name,
                message=f"Internal error: {type(exc).__name__}",
            )
        )
