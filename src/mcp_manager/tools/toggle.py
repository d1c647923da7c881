"""toggle_client_server tool -- enable or disable a server for one client."""

from __future__ import annotations

import asyncio
from dataclasses import asdict

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError
from mcp_manager.models import ToggleResult
from mcp_manager.tools._helpers import get_context


async def toggle_client_server(
    client: str,
    server_name: str,
    enabled: bool,
    ctx: Context,
) -> dict[str, object]:
    """Enable or disable a registry server for one client.

    Updates the client's enabled list in the registry, then rewrites the
    client's config file. The previous file is kept as
    ``<file>.backup.<timestamp>``.

    Args:
        client: Client id from list_clients.
        server_name: Server name from list_servers.
        enabled: True to copy the server into the client config, False to
            remove it.
    """
    try:
        app = get_context(ctx)
        path = await asyncio.to_thread(
            app.orchestrator.toggle_client_server, client, server_name, enabled
        )
        config_file = str(path)
        return asdict(
            ToggleResult(
                success=True,
                client=client,
                server_name=server_name,
                enabled=enabled,
                config_file=config_file,
                message=(
                    f"Server '{server_name}' {'enabled' if enabled else 'disabled'} for "
                    f"'{client}' in {config_file}. Restart the client to apply."
                ),
            )
        )
    except McpManagerError as exc:
        return asdict(
            ToggleResult(
                success=False,
                client=client,
                server_name=server_name,
                enabled=enabled,
                message=str(exc),
            )
        )
    except Exception as exc:
        await ctx.error(f"Unexpected error in toggle_client_server: {exc}")
        return asdict(
            ToggleResult(
                success=False,
                client=client,
                server_name=server_name,
                enabled=enabled,
                message=f"Internal error: {type(exc).__name__}",
            )
        )
