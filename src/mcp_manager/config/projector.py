"""Project registry servers into client config files, non-destructively.

Enabling a server copies its entire registry config -- every key, no
allow-list -- into ``mcpServers.<name>`` of the client file. Clients disagree
on schema (``headers``, ``cwd``, ``httpUrl``, vendor fields), so nothing is
filtered. Disabling removes the key. Every other top-level key in the client
file is left as found.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from mcp_manager.config.reader import managed_servers, read_config
from mcp_manager.config.writer import client_file_lock, replace_client_config, write_client_config
from mcp_manager.errors import ClientNotFoundError, ServerNotFoundError
from mcp_manager.models import ClientDefinition, Registry
from mcp_manager.registry.loader import expand_path
from mcp_manager.validation.transport import validate_client_servers

logger = logging.getLogger(__name__)


class ClientProjector:
    """Reads, merges and rewrites client config files from the current registry.

    ``registry`` is called on every operation so the projector always sees
    the registry the orchestrator currently holds.
    """

    def __init__(
        self,
        registry: Callable[[], Registry],
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._registry = registry
        self._clock = clock

    def _client(self, client_id: str) -> ClientDefinition:
        client = self._registry().find_client(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    def config_path(self, client_id: str) -> Path:
        return expand_path(self._client(client_id).config_path)

    def read(self, client_id: str) -> dict[str, object]:
        return read_config(self.config_path(client_id))

    def write(self, client_id: str, blob: dict[str, object]) -> Path | None:
        path = self.config_path(client_id)
        validate_client_servers(blob)
        return write_client_config(path, blob, now=self._clock())

    def update_server_status(self, client_id: str, server_name: str, enabled: bool) -> None:
        path = self.config_path(client_id)

        with client_file_lock(path):
            blob = read_config(path)
            servers = managed_servers(blob)

            if enabled:
                server = self._registry().find_server(server_name)
                if server is None:
                    raise ServerNotFoundError(server_name)
                servers[server_name] = server.config_copy()
            else:
                servers.pop(server_name, None)

            validate_client_servers(blob)
            replace_client_config(path, blob, now=self._clock())

        logger.info(
            "%s server '%s' for client '%s' (%s)",
            "Enabled" if enabled else "Disabled",
            server_name,
            client_id,
            path,
        )

    def get_server_status(self, client_id: str, server_name: str) -> bool:
        return server_name in managed_servers(self.read(client_id))
