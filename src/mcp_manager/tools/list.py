"""list_servers / list_clients tools -- show the central registry."""

from __future__ import annotations

import asyncio

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError
from mcp_manager.tools._helpers import get_context, mask_server_config
from mcp_manager.validation.transport import detect_transport


async def list_servers(ctx: Context) -> list[dict[str, object]]:
    """List every MCP server in the central registry, in registry order.

    Secret-looking env and header values are masked as "***".

    Returns:
        One entry per server with: name, transport ("command", "url" or
        "httpUrl"), and the masked config.
    """
    try:
        app = get_context(ctx)
        result: list[dict[str, object]] = []
        servers = await asyncio.to_thread(app.orchestrator.list_servers)
        for server in servers:
            try:
                transport = detect_transport(server.config).kind.value
            except McpManagerError:
                transport = ""
            result.append(
                {
                    "name": server.name,
                    "transport": transport,
                    "config": mask_server_config(server.config),
                }
            )
        return result
    except McpManagerError as exc:
        return [{"success": False, "error": str(exc)}]
    except Exception as exc:
        await ctx.error(f"Unexpected error in list_servers: {exc}")
        return [{"success": False, "error": f"Internal error: {type(exc).__name__}"}]


async def list_clients(ctx: Context) -> dict[str, object]:
    """List configured clients with their config file and enabled servers.

    Returns:
        Mapping of client id to {config_path, enabled}.
    """
    try:
        app = get_context(ctx)
        clients = await asyncio.to_thread(app.orchestrator.list_clients)
        return {
            client_id: {"config_path": client.config_path, "enabled": list(client.enabled)}
            for client_id, client in clients.items()
        }
    except McpManagerError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in list_clients: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
