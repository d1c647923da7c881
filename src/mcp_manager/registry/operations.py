"""Pure registry transforms. Each returns a new Registry; the input is untouched."""

from __future__ import annotations

import copy
import shutil
from dataclasses import replace

from mcp_manager.errors import ClientNotFoundError, DuplicateServerNameError, ServerNotFoundError
from mcp_manager.models import ClientDefinition, Registry, ServerDefinition
from mcp_manager.validation.transport import CommandResolver, validate_server


def add_unique(items: list[str], item: str) -> list[str]:
    if item in items:
        return list(items)
    return [*items, item]


def remove_item(items: list[str], item: str) -> list[str]:
    """Drop every occurrence of *item*."""
    return [existing for existing in items if existing != item]


def add_server(
    registry: Registry,
    name: str,
    config: dict[str, object],
    *,
    which: CommandResolver = shutil.which,
) -> Registry:
    """Append a validated server. Existing servers keep their positions."""
    if registry.has_server(name):
        raise DuplicateServerNameError(name)
    validate_server(name, config, which=which)

    server = ServerDefinition(name=name, config=copy.deepcopy(config))
    return replace(registry, servers=[*registry.servers, server])


def remove_server(registry: Registry, name: str) -> Registry:
    """Drop a server and every client reference to it."""
    if not registry.has_server(name):
        raise ServerNotFoundError(name)

    clients = {
        client_id: replace(client, enabled=remove_item(client.enabled, name))
        for client_id, client in registry.clients.items()
    }
    servers = [server for server in registry.servers if server.name != name]
    return replace(registry, servers=servers, clients=clients)


def set_client_server_enabled(
    registry: Registry,
    client_id: str,
    server_name: str,
    enabled: bool,
) -> Registry:
    """Add *server_name* to (or remove it from) one client's enabled list."""
    client = registry.find_client(client_id)
    if client is None:
        raise ClientNotFoundError(client_id)
    if not registry.has_server(server_name):
        raise ServerNotFoundError(server_name)

    if enabled:
        names = add_unique(client.enabled, server_name)
    else:
        names = remove_item(client.enabled, server_name)

    updated: ClientDefinition = replace(client, enabled=names)
    return replace(registry, clients={**registry.clients, client_id: updated})
