"""Single entry point that mutates the registry and keeps client files consistent.

Every mutation follows validate-before-mutate: build the candidate registry,
validate it, persist it, and only then make it the live registry. A failure
at any of those steps leaves both memory and disk as they were. Projection
into client files runs after the registry is committed; a failed projection
is reported to the caller and repaired by the next sync_all_clients().

All mutations and projections are serialized by one re-entrant lock.
"""

from __future__ import annotations

import logging
import shutil
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from mcp_manager.config.base import ClientProjectorPort
from mcp_manager.config.projector import ClientProjector
from mcp_manager.errors import McpManagerError, ServerNotFoundError, SyncError
from mcp_manager.models import (
    ClientDefinition,
    ClientSyncStatus,
    Registry,
    ServerDefinition,
    SyncReport,
)
from mcp_manager.registry import operations
from mcp_manager.registry.base import RegistryStorePort
from mcp_manager.registry.loader import YamlRegistryStore, resolve_registry_path
from mcp_manager.validation.registry import validate_registry
from mcp_manager.validation.transport import CommandResolver

logger = logging.getLogger(__name__)


class SyncOrchestrator:
    """Owns the live registry and fans changes out to client config files."""

    def __init__(
        self,
        store: RegistryStorePort,
        registry: Registry | None = None,
        *,
        projector: ClientProjectorPort | None = None,
        which: CommandResolver = shutil.which,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._store = store
        self._which = which
        self._lock = threading.RLock()
        if registry is None:
            registry = store.load()
        validate_registry(registry, which=which)
        self._registry = registry
        self._projector = projector or ClientProjector(self._current, clock=clock)

    @classmethod
    def from_path(
        cls, path: str = "", *, which: CommandResolver = shutil.which
    ) -> SyncOrchestrator:
        """Load (or create) the registry file and validate it."""
        store = YamlRegistryStore(resolve_registry_path(path))
        return cls(store, which=which)

    def _current(self) -> Registry:
        return self._registry

    @property
    def registry_path(self) -> Path:
        return self._store.path

    def _commit(self, candidate: Registry) -> None:
        """Validate, persist, then swap in *candidate*. Caller holds the lock."""
        validate_registry(candidate, which=self._which)
        self._store.save(candidate)
        self._registry = candidate

    # ─── Queries ──────────────────────────────────────────────

    def registry(self) -> Registry:
        with self._lock:
            return self._registry.snapshot()

    def list_servers(self) -> list[ServerDefinition]:
        return self.registry().servers

    def list_clients(self) -> dict[str, ClientDefinition]:
        return self.registry().clients

    def get_server(self, server_name: str) -> dict[str, object]:
        """The registry config of one server (a copy)."""
        with self._lock:
            server = self._registry.find_server(server_name)
            if server is None:
                raise ServerNotFoundError(server_name)
            return server.config_copy()

    def get_client_server_status(self, client_id: str, server_name: str) -> bool:
        """Whether the client's file currently projects *server_name*."""
        with self._lock:
            return self._projector.get_server_status(client_id, server_name)

    def read_client_config(self, client_id: str) -> dict[str, object]:
        with self._lock:
            return self._projector.read(client_id)

    def client_config_path(self, client_id: str) -> Path:
        with self._lock:
            return self._projector.config_path(client_id)

    # ─── Mutations ────────────────────────────────────────────

    def reload(self) -> Registry:
        """Re-read the registry from its store, e.g. after a manual edit."""
        with self._lock:
            candidate = self._store.load()
            validate_registry(candidate, which=self._which)
            self._registry = candidate
            logger.info("Reloaded registry from %s", self._store.path)
            return candidate.snapshot()

    def add_server(self, name: str, config: dict[str, object]) -> ServerDefinition:
        with self._lock:
            candidate = operations.add_server(self._registry, name, config, which=self._which)
            self._commit(candidate)
            logger.info("Added server '%s'", name)
            return ServerDefinition(name=name, config=candidate.servers[-1].config_copy())

    def toggle_client_server(self, client_id: str, server_name: str, enabled: bool) -> Path:
        """Flip one server for one client in the registry, then in its file.

        Returns the client config file that was rewritten.
        """
        with self._lock:
            candidate = operations.set_client_server_enabled(
                self._registry, client_id, server_name, enabled
            )
            self._commit(candidate)
            self._projector.update_server_status(client_id, server_name, enabled)
            return self._projector.config_path(client_id)

    def remove_server(self, server_name: str) -> list[str]:
        """Delete a server from the registry and withdraw it from every client file.

        Returns the ids of clients whose files were rewritten.

        Raises:
            SyncError: The registry change was committed but some client
                files could not be updated.
        """
        with self._lock:
            candidate = operations.remove_server(self._registry, server_name)
            self._commit(candidate)
            logger.info("Removed server '%s' from registry", server_name)

            updated: list[str] = []
            failures: dict[str, McpManagerError] = {}
            for client_id in candidate.clients:
                try:
                    if self._projector.get_server_status(client_id, server_name):
                        self._projector.update_server_status(client_id, server_name, False)
                        updated.append(client_id)
                except McpManagerError as exc:
                    logger.warning(
                        "Failed to withdraw '%s' from '%s': %s", server_name, client_id, exc
                    )
                    failures[client_id] = exc

            if failures:
                raise SyncError(failures)
            return updated

    def sync_all_clients(self) -> SyncReport:
        """Rewrite every client file so it matches the registry.

        Best effort: every client is attempted even when an earlier one
        fails; a client stops at its own first failure. Idempotent, so a
        failed run can simply be repeated.

        Raises:
            SyncError: Aggregates the per-client failures.
        """
        with self._lock:
            registry = self._registry
            statuses: list[ClientSyncStatus] = []
            failures: dict[str, McpManagerError] = {}

            for client_id, client in registry.clients.items():
                try:
                    statuses.append(self._sync_client(registry, client_id, client))
                except McpManagerError as exc:
                    logger.warning("Failed to sync client '%s': %s", client_id, exc)
                    failures[client_id] = exc

            if failures:
                raise SyncError(failures)
            return SyncReport(total=len(statuses), clients=statuses)

    def _sync_client(
        self, registry: Registry, client_id: str, client: ClientDefinition
    ) -> ClientSyncStatus:
        enabled_names: list[str] = []
        disabled_names: list[str] = []
        for server in registry.servers:
            enabled = client.is_enabled(server.name)
            self._projector.update_server_status(client_id, server.name, enabled)
            (enabled_names if enabled else disabled_names).append(server.name)

        logger.info("Synced client '%s': %d enabled server(s)", client_id, len(enabled_names))
        return ClientSyncStatus(
            client=client_id,
            config_file=str(self._projector.config_path(client_id)),
            enabled_servers=enabled_names,
            disabled_servers=disabled_names,
        )
