"""Read-only status tools: one server's registry config, one client's projection."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError
from mcp_manager.tools._helpers import get_context, mask_client_config, mask_server_config


async def get_server(server_name: str, ctx: Context) -> dict[str, object]:
    """Show the registry config of one MCP server (secrets masked).

    Args:
        server_name: Exact server name, as shown by list_servers.
    """
    try:
        app = get_context(ctx)
        config = await asyncio.to_thread(app.orchestrator.get_server, server_name)
        return {"success": True, "server_name": server_name, "config": mask_server_config(config)}
    except McpManagerError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in get_server: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}


async def get_client_server_status(
    client: str,
    server_name: str,
    ctx: Context,
) -> dict[str, object]:
    """Check whether a client's config file currently contains a server.

    A client whose config file does not exist yet reports every server as
    not enabled.

    Args:
        client: Client id from list_clients.
        server_name: Server name from list_servers.
    """
    try:
        app = get_context(ctx)
        enabled = await asyncio.to_thread(
            app.orchestrator.get_client_server_status, client, server_name
        )
        return {"success": True, "client": client, "server_name": server_name, "enabled": enabled}
    except McpManagerError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in get_client_server_status: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}


async def view_client_config(client: str, ctx: Context) -> dict[str, object]:
    """Show a client's full config file as this manager sees it (secrets masked).

    Args:
        client: Client id from list_clients.
    """
    try:
        app = get_context(ctx)
        blob = await asyncio.to_thread(app.orchestrator.read_client_config, client)
        path = await asyncio.to_thread(app.orchestrator.client_config_path, client)
        return {
            "success": True,
            "client": client,
            "config_file": str(path),
            "config": mask_client_config(blob),
        }
    except McpManagerError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in view_client_config: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
