"""Whole-registry validation: invariants beyond individual server validity."""

from __future__ import annotations

import shutil

from mcp_manager.errors import (
    DanglingServerReferenceError,
    InvalidClientError,
    InvalidPortError,
    InvalidServerError,
    NoClientsError,
    NoServersError,
    ServerValidationError,
)
from mcp_manager.models import ClientDefinition, Registry
from mcp_manager.validation.transport import CommandResolver, validate_server

MIN_PORT = 1
MAX_PORT = 65535


def validate_client(client_id: str, client: ClientDefinition) -> None:
    if not client_id.strip():
        raise InvalidClientError(client_id, "client name cannot be empty")
    if not client.config_path.strip():
        raise InvalidClientError(client_id, "client config path cannot be empty")


def validate_registry(registry: Registry, *, which: CommandResolver = shutil.which) -> None:
    """Raise the first invariant *registry* breaks.

    Order: port, server count, client count, each server, then each
    client together with its enabled references.
    """
    port = registry.server_port
    if isinstance(port, bool) or not isinstance(port, int) or not MIN_PORT <= port <= MAX_PORT:
        raise InvalidPortError(port)
    if not registry.servers:
        raise NoServersError()
    if not registry.clients:
        raise NoClientsError()

    for server in registry.servers:
        try:
            validate_server(server.name, server.config, which=which)
        except ServerValidationError as exc:
            raise InvalidServerError(server.name, exc) from exc

    names = set(registry.server_names())
    for client_id, client in registry.clients.items():
        validate_client(client_id, client)
        for server_name in client.enabled:
            if server_name not in names:
                raise DanglingServerReferenceError(client_id, server_name)
