"""remove_server tool -- delete an MCP server from the registry and all clients."""

from __future__ import annotations

import asyncio
from dataclasses import asdict

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError, SyncError
from mcp_manager.models import RemoveResult
from mcp_manager.tools._helpers import get_context


async def remove_server(server_name: str, ctx: Context) -> dict[str, object]:
    """Remove an MCP server from the registry and from every client config.

    The user must restart affected MCP clients for the change to take effect.

    Args:
        server_name: Exact name of the server to remove, as shown by
            list_servers.

    Returns:
        Result with success status, message, and the clients whose config
        files were rewritten. Partial failures include per_client_errors.
    """
    try:
        app = get_context(ctx)
        updated = await asyncio.to_thread(app.orchestrator.remove_server, server_name)
        return asdict(
            RemoveResult(
                success=True,
                server_name=server_name,
                message=(
                    f"Server '{server_name}' removed from the registry and "
                    f"{len(updated)} client config(s). Restart your MCP clients to apply."
                ),
                clients_updated=updated,
            )
        )
    except SyncError as exc:
        result = asdict(RemoveResult(success=False, server_name=server_name, message=str(exc)))
        result["per_client_errors"] = {client: str(err) for client, err in exc.failures.items()}
        return result
    except McpManagerError as exc:
        return asdict(RemoveResult(success=False, server_name=server_name, message=str(exc)))
    except Exception as exc:
        await ctx.error(f"Unexpected error in remove_server: {exc}")
        return asdict(
            RemoveResult(
                success=False,
                server_name=server_name,
                message=f"Internal error: {type(exc).__name__}",
            )
        )
