"""MCP server exposing the central registry and client sync operations."""

from __future__ import annotations

import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from mcp_manager.sync.orchestrator import SyncOrchestrator
from mcp_manager.tools.add import add_server
from mcp_manager.tools.list import list_clients, list_servers
from mcp_manager.tools.remove import remove_server
from mcp_manager.tools.status import get_client_server_status, get_server, view_client_config
from mcp_manager.tools.sync import sync_clients
from mcp_manager.tools.toggle import toggle_client_server

CONFIG_ENV_VAR = "MCP_MANAGER_CONFIG"


@dataclass(frozen=True, slots=True)
class AppContext:
    """Shared state across all tool invocations."""

    orchestrator: SyncOrchestrator


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[AppContext]:
    """Load and validate the registry once -- the composition root."""
    orchestrator = SyncOrchestrator.from_path(os.environ.get(CONFIG_ENV_VAR, ""))
    yield AppContext(orchestrator=orchestrator)


mcp = FastMCP(
    "mcp-server-manager",
    instructions=(
        "mcp-server-manager keeps one central registry of MCP servers and "
        "projects chosen subsets of it into each AI client's own config file "
        "(Claude Code, Gemini CLI, ...).\n\n"
        "### Workflow\n"
        "1. **list_servers** / **list_clients** -- see the registry and which "
        "servers each client has enabled.\n"
        "2. **add_server** -- register a server. It must declare exactly one of "
        "command, url or httpUrl; every other field is passed to clients as-is.\n"
        "3. **toggle_client_server** -- enable or disable a server for a client. "
        "The client's file is backed up before it is rewritten; unrelated keys "
        "in that file are preserved.\n"
        "4. **sync_clients** -- rewrite every client file from the registry, "
        "e.g. after the registry file was edited by hand (reload=True).\n\n"
        "### Other tools\n"
        "- **get_server** -- one server's registry config (secrets masked).\n"
        "- **get_client_server_status** -- whether a client's file contains a server.\n"
        "- **view_client_config** -- a client's whole file (secrets masked).\n"
        "- **remove_server** -- delete a server from the registry and every client.\n\n"
        "Clients must be restarted to pick up config changes."
    ),
    lifespan=app_lifespan,
)

# ─── Read-only tools ──────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(list_servers)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(list_clients)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(get_server)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(get_client_server_status)
mcp.tool(annotations=ToolAnnotations(readOnlyHint=True))(view_client_config)

# ─── Destructive tools ────────────────────────────────────────
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(add_server)
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(toggle_client_server)
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(remove_server)
mcp.tool(annotations=ToolAnnotations(destructiveHint=True))(sync_clients)
