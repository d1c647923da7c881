"""Port: Projecting the registry into client config files."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol


class ClientProjectorPort(Protocol):
    """Port for reading and rewriting one client's config file."""

    def config_path(self, client_id: str) -> Path:
        """Expanded path of the client's config file."""
        ...

    def read(self, client_id: str) -> dict[str, object]:
        """Read the client's full config, with ``mcpServers`` guaranteed present."""
        ...

    def write(self, client_id: str, blob: dict[str, object]) -> Path | None:
        """Back up and overwrite the client's config. Returns the backup path."""
        ...

    def update_server_status(self, client_id: str, server_name: str, enabled: bool) -> None:
        """Project (or withdraw) one registry server into the client's config."""
        ...

    def get_server_status(self, client_id: str, server_name: str) -> bool:
        """Whether the client's config currently contains the server."""
        ...
