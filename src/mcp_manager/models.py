"""Domain models for mcp-server-manager. All frozen dataclasses -- no mutation after creation.

Registry changes produce a new Registry (see registry/operations.py) so a
candidate state can be validated and persisted before it replaces the live one.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import StrEnum

DEFAULT_SERVER_PORT = 6543

# ─── Enumerations ─────────────────────────────────────────────


class TransportKind(StrEnum):
    """Config key that declares a server's transport, in detection order."""

    COMMAND = "command"
    URL = "url"
    HTTP_URL = "httpUrl"


# ─── Registry Models ──────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class TransportSpec:
    """The single transport a server declares."""

    kind: TransportKind
    value: str


@dataclass(frozen=True, slots=True)
class ServerDefinition:
    """A named MCP server. ``config`` is passed to clients verbatim."""

    name: str
    config: dict[str, object] = field(default_factory=dict)

    def config_copy(self) -> dict[str, object]:
        """Deep, independent copy of the config mapping."""
        return copy.deepcopy(self.config)


@dataclass(frozen=True, slots=True)
class ClientDefinition:
    """An AI client whose JSON config file receives a projection of the registry."""

    config_path: str
    enabled: list[str] = field(default_factory=list)

    def is_enabled(self, server_name: str) -> bool:
        return server_name in self.enabled


@dataclass(frozen=True, slots=True)
class Registry:
    """The central config: ordered servers plus per-client enablement."""

    servers: list[ServerDefinition] = field(default_factory=list)
    clients: dict[str, ClientDefinition] = field(default_factory=dict)
    server_port: int = DEFAULT_SERVER_PORT

    def find_server(self, name: str) -> ServerDefinition | None:
        for server in self.servers:
            if server.name == name:
                return server
        return None

    def has_server(self, name: str) -> bool:
        return self.find_server(name) is not None

    def server_names(self) -> list[str]:
        return [server.name for server in self.servers]

    def find_client(self, client_id: str) -> ClientDefinition | None:
        return self.clients.get(client_id)

    def snapshot(self) -> Registry:
        """Deep copy safe to hand to callers outside the orchestrator lock."""
        return copy.deepcopy(self)


# ─── Tool Return Models ───────────────────────────────────────


@dataclass(frozen=True, slots=True)
class AddServerResult:
    success: bool
    server_name: str
    message: str
    config: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ToggleResult:
    success: bool
    client: str
    server_name: str
    enabled: bool
    message: str
    config_file: str = ""


@dataclass(frozen=True, slots=True)
class RemoveResult:
    success: bool
    server_name: str
    message: str
    clients_updated: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class ClientSyncStatus:
    """Outcome of reconciling one client file."""

    client: str
    config_file: str
    enabled_servers: list[str] = field(default_factory=list)
    disabled_servers: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class SyncReport:
    """Aggregated result of a full sync across all clients."""

    total: int
    clients: list[ClientSyncStatus] = field(default_factory=list)
