"""sync_clients tool -- reconcile every client config with the registry."""

from __future__ import annotations

import asyncio
from dataclasses import asdict

from mcp.server.fastmcp import Context

from mcp_manager.errors import McpManagerError, SyncError
from mcp_manager.tools._helpers import get_context


async def sync_clients(ctx: Context, reload: bool = False) -> dict[str, object]:
    """Rewrite every client's config so it matches the registry's enabled lists.

    Use after editing the registry file by hand. Every client is attempted;
    failures are reported per client and the sync can be re-run safely.

    Args:
        reload: Re-read the registry file before syncing.
    """
    try:
        app = get_context(ctx)
        if reload:
            await asyncio.to_thread(app.orchestrator.reload)
        report = await asyncio.to_thread(app.orchestrator.sync_all_clients)
        result = asdict(report)
        result["success"] = True
        return result
    except SyncError as exc:
        return {
            "success": False,
            "error": str(exc),
            "per_client_errors": {client: str(err) for client, err in exc.failures.items()},
        }
    except McpManagerError as exc:
        return {"success": False, "error": str(exc)}
    except Exception as exc:
        await ctx.error(f"Unexpected error in sync_clients: {exc}")
        return {"success": False, "error": f"Internal error: {type(exc).__name__}"}
