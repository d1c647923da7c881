"""Tests for SyncOrchestrator: registry mutations fanned out to client files."""

from __future__ import annotations

import json
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest

from mcp_manager.errors import (
    ClientNotFoundError,
    CommandNotFoundError,
    DuplicateServerNameError,
    MalformedClientConfigError,
    NoClientsError,
    NoServersError,
    RegistrySaveError,
    ServerNotFoundError,
    SyncError,
)
from mcp_manager.models import ClientDefinition, Registry, ServerDefinition
from mcp_manager.registry.loader import YamlRegistryStore, load_registry, save_registry
from mcp_manager.sync.orchestrator import SyncOrchestrator


def _read_json(path: str | Path) -> dict[str, object]:
    return json.loads(Path(path).read_text())


@pytest.fixture
def orchestrator(store: YamlRegistryStore, which) -> SyncOrchestrator:
    return SyncOrchestrator(store, which=which)


class TestConstruction:
    def test_loads_registry_from_store(self, orchestrator, registry):
        assert orchestrator.registry() == registry

    def test_rejects_invalid_registry(self, store, which, registry):
        save_registry(store.path, replace(registry, clients={}))
        with pytest.raises(NoClientsError):
            SyncOrchestrator(store, which=which)

    def test_from_path(self, store, which):
        orch = SyncOrchestrator.from_path(str(store.path), which=which)
        assert orch.registry_path == store.path
        assert orch.list_servers()[0].name == "filesystem"


class TestQueries:
    def test_list_servers_in_order(self, orchestrator):
        assert [s.name for s in orchestrator.list_servers()] == ["filesystem", "context7"]

    def test_list_clients(self, orchestrator):
        assert set(orchestrator.list_clients()) == {"claude_code", "gemini_cli"}

    def test_snapshots_are_independent(self, orchestrator):
        orchestrator.list_servers()[0].config["command"] = "hacked"
        orchestrator.list_clients()["claude_code"].enabled.append("ghost")
        assert orchestrator.get_server("filesystem")["command"] == "npx"
        assert orchestrator.list_clients()["claude_code"].enabled == ["filesystem"]

    def test_get_server(self, orchestrator):
        assert orchestrator.get_server("context7")["url"] == "https://mcp.context7.com/mcp"

    def test_get_unknown_server(self, orchestrator):
        with pytest.raises(ServerNotFoundError):
            orchestrator.get_server("ghost")

    def test_client_status_for_missing_file(self, orchestrator):
        assert orchestrator.get_client_server_status("gemini_cli", "context7") is False


class TestAddServer:
    def test_appends_and_persists(self, orchestrator, store):
        server = orchestrator.add_server("tools", {"command": "uvx", "args": ["tools"]})

        assert server == ServerDefinition(
            name="tools", config={"command": "uvx", "args": ["tools"]}
        )
        assert load_registry(store.path).server_names() == ["filesystem", "context7", "tools"]

    def test_duplicate_rejected(self, orchestrator):
        with pytest.raises(DuplicateServerNameError):
            orchestrator.add_server("filesystem", {"command": "npx"})

    def test_invalid_command_not_added(self, orchestrator, store):
        before = store.path.read_text()
        with pytest.raises(CommandNotFoundError):
            orchestrator.add_server("x", {"command": "definitely-not-a-real-binary-xyz"})
        assert "x" not in [s.name for s in orchestrator.list_servers()]
        assert store.path.read_text() == before

    def test_save_failure_keeps_memory_unchanged(self, orchestrator, monkeypatch):
        def _fail(registry: Registry) -> None:
            raise RegistrySaveError("disk full")

        monkeypatch.setattr(orchestrator._store, "save", _fail)

        with pytest.raises(RegistrySaveError):
            orchestrator.add_server("tools", {"command": "uvx"})
        assert [s.name for s in orchestrator.list_servers()] == ["filesystem", "context7"]


class TestToggleClientServer:
    def test_enable_updates_registry_and_client_file(self, orchestrator, store, registry):
        path = orchestrator.toggle_client_server("gemini_cli", "context7", True)

        assert path == Path(registry.clients["gemini_cli"].config_path)
        assert load_registry(store.path).clients["gemini_cli"].enabled == ["context7"]
        data = _read_json(registry.clients["gemini_cli"].config_path)
        assert data["mcpServers"]["context7"] == registry.find_server("context7").config

    def test_enable_twice_no_duplicates(self, orchestrator):
        orchestrator.toggle_client_server("gemini_cli", "context7", True)
        orchestrator.toggle_client_server("gemini_cli", "context7", True)
        assert orchestrator.list_clients()["gemini_cli"].enabled == ["context7"]

    def test_disable(self, orchestrator, registry):
        orchestrator.toggle_client_server("claude_code", "filesystem", True)
        orchestrator.toggle_client_server("claude_code", "filesystem", False)

        assert orchestrator.list_clients()["claude_code"].enabled == []
        assert orchestrator.get_client_server_status("claude_code", "filesystem") is False

    def test_unknown_client(self, orchestrator):
        with pytest.raises(ClientNotFoundError):
            orchestrator.toggle_client_server("cursor", "context7", True)

    def test_unknown_server(self, orchestrator):
        with pytest.raises(ServerNotFoundError):
            orchestrator.toggle_client_server("gemini_cli", "ghost", True)

    def test_save_failure_leaves_client_untouched(self, orchestrator, registry, monkeypatch):
        def _fail(candidate: Registry) -> None:
            raise RegistrySaveError("disk full")

        monkeypatch.setattr(orchestrator._store, "save", _fail)

        with pytest.raises(RegistrySaveError):
            orchestrator.toggle_client_server("gemini_cli", "context7", True)
        assert orchestrator.list_clients()["gemini_cli"].enabled == []
        assert not Path(registry.clients["gemini_cli"].config_path).exists()

    def test_concurrent_toggles_are_not_lost(self, orchestrator):
        names = [f"srv{i}" for i in range(8)]
        for name in names:
            orchestrator.add_server(name, {"command": "uvx"})

        threads = [
            threading.Thread(target=orchestrator.toggle_client_server, args=("gemini_cli", n, True))
            for n in names
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(orchestrator.list_clients()["gemini_cli"].enabled) == sorted(names)
        for name in names:
            assert orchestrator.get_client_server_status("gemini_cli", name) is True


class TestSyncAllClients:
    def test_projects_enabled_lists(self, orchestrator, registry):
        report = orchestrator.sync_all_clients()

        assert report.total == 2
        claude = _read_json(registry.clients["claude_code"].config_path)
        gemini = _read_json(registry.clients["gemini_cli"].config_path)
        assert set(claude["mcpServers"]) == {"filesystem"}
        assert gemini["mcpServers"] == {}

    def test_report_lists_enabled_and_disabled(self, orchestrator):
        report = orchestrator.sync_all_clients()
        claude = next(c for c in report.clients if c.client == "claude_code")
        assert claude.enabled_servers == ["filesystem"]
        assert claude.disabled_servers == ["context7"]

    def test_removes_stale_registry_servers(self, orchestrator, registry):
        path = Path(registry.clients["claude_code"].config_path)
        path.write_text(json.dumps({"mcpServers": {"context7": {"url": "https://old"}}}))

        orchestrator.sync_all_clients()

        assert set(_read_json(path)["mcpServers"]) == {"filesystem"}

    def test_idempotent(self, orchestrator, registry):
        orchestrator.sync_all_clients()
        first = Path(registry.clients["claude_code"].config_path).read_text()
        orchestrator.sync_all_clients()
        assert Path(registry.clients["claude_code"].config_path).read_text() == first

    def test_best_effort_aggregates_failures(self, orchestrator, registry):
        Path(registry.clients["claude_code"].config_path).write_text("{broken")

        with pytest.raises(SyncError) as exc_info:
            orchestrator.sync_all_clients()

        assert set(exc_info.value.failures) == {"claude_code"}
        assert isinstance(exc_info.value.failures["claude_code"], MalformedClientConfigError)
        assert Path(registry.clients["gemini_cli"].config_path).exists()

    def test_undecodable_client_file_does_not_stop_others(self, orchestrator, registry):
        Path(registry.clients["claude_code"].config_path).write_bytes(
            b'{"mcpServers": {}, "x": "\xff"}'
        )

        with pytest.raises(SyncError) as exc_info:
            orchestrator.sync_all_clients()

        assert isinstance(exc_info.value.failures["claude_code"], MalformedClientConfigError)
        assert Path(registry.clients["gemini_cli"].config_path).exists()

    def test_pre_sync_file_survives_in_a_backup(self, store, which, registry):
        orch = SyncOrchestrator(store, which=which, clock=lambda: datetime(2026, 1, 1, 12, 0, 0))
        path = Path(registry.clients["claude_code"].config_path)
        original = json.dumps({"mcpServers": {}, "theme": "dark"})
        path.write_text(original)

        orch.sync_all_clients()

        backups = sorted(path.parent.glob("claude.json.backup.*"))
        assert [b.name for b in backups] == [
            "claude.json.backup.20260101-120000",
            "claude.json.backup.20260101-120000.1",
        ]
        assert backups[0].read_text() == original

    def test_reload_picks_up_manual_edit(self, orchestrator, store, registry):
        edited = replace(
            registry,
            clients={
                **registry.clients,
                "gemini_cli": ClientDefinition(
                    config_path=registry.clients["gemini_cli"].config_path,
                    enabled=["context7"],
                ),
            },
        )
        save_registry(store.path, edited)

        orchestrator.reload()
        orchestrator.sync_all_clients()

        gemini = _read_json(registry.clients["gemini_cli"].config_path)
        assert set(gemini["mcpServers"]) == {"context7"}


class TestRemoveServer:
    def test_removes_from_registry_and_clients(self, orchestrator, store, registry):
        orchestrator.sync_all_clients()

        updated = orchestrator.remove_server("filesystem")

        assert updated == ["claude_code"]
        assert load_registry(store.path).server_names() == ["context7"]
        assert orchestrator.list_clients()["claude_code"].enabled == []
        claude = _read_json(registry.clients["claude_code"].config_path)
        assert "filesystem" not in claude["mcpServers"]

    def test_unknown_server(self, orchestrator):
        with pytest.raises(ServerNotFoundError):
            orchestrator.remove_server("ghost")

    def test_cannot_remove_last_server(self, orchestrator):
        orchestrator.remove_server("context7")
        with pytest.raises(NoServersError):
            orchestrator.remove_server("filesystem")
        assert [s.name for s in orchestrator.list_servers()] == ["filesystem"]


class TestEndToEnd:
    def test_toggle_scenario_with_real_path_lookup(self, tmp_path: Path):
        client_file = tmp_path / "fresh" / "c1.json"
        registry = Registry(
            servers=[
                ServerDefinition(name="filesystem", config={"command": "echo", "args": ["hi"]})
            ],
            clients={"c1": ClientDefinition(config_path=str(client_file), enabled=[])},
        )
        store = YamlRegistryStore(tmp_path / "config.yaml")
        orch = SyncOrchestrator(store, registry)

        orch.toggle_client_server("c1", "filesystem", True)

        assert _read_json(client_file)["mcpServers"]["filesystem"] == {
            "command": "echo",
            "args": ["hi"],
        }
        assert orch.get_client_server_status("c1", "filesystem") is True
        enabled_state = client_file.read_text()

        orch.toggle_client_server("c1", "filesystem", False)

        assert "filesystem" not in _read_json(client_file)["mcpServers"]
        backups = list(client_file.parent.glob("c1.json.backup.*"))
        assert backups
        assert enabled_state in [b.read_text() for b in backups]
