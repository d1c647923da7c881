"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from mcp_manager.models import ClientDefinition, Registry, ServerDefinition
from mcp_manager.registry.loader import YamlRegistryStore, save_registry

# Commands the fake PATH knows about
KNOWN_COMMANDS = frozenset({"npx", "uvx", "echo", "docker"})


def fake_which(command: str) -> str | None:
    """Stand-in for shutil.which with a fixed, host-independent PATH."""
    if command in KNOWN_COMMANDS:
        return f"/usr/bin/{command}"
    return None


def make_registry(tmp_path: Path, **overrides: object) -> Registry:
    """A valid two-server, two-client registry with client files under *tmp_path*."""
    servers = [
        ServerDefinition(name="filesystem", config={"command": "npx", "args": ["-y", "fs"]}),
        ServerDefinition(
            name="context7",
            config={
                "type": "http",
                "url": "https://mcp.context7.com/mcp",
                "headers": {"CONTEXT7_API_KEY": "abc"},
            },
        ),
    ]
    clients = {
        "claude_code": ClientDefinition(
            config_path=str(tmp_path / "claude.json"), enabled=["filesystem"]
        ),
        "gemini_cli": ClientDefinition(
            config_path=str(tmp_path / "gemini" / "settings.json"), enabled=[]
        ),
    }
    fields: dict[str, object] = {"servers": servers, "clients": clients, "server_port": 6543}
    fields.update(overrides)
    return Registry(**fields)


@pytest.fixture
def which():
    return fake_which


@pytest.fixture
def registry(tmp_path: Path) -> Registry:
    return make_registry(tmp_path)


@pytest.fixture
def store(tmp_path: Path, registry: Registry) -> YamlRegistryStore:
    path = tmp_path / "config.yaml"
    save_registry(path, registry)
    return YamlRegistryStore(path)
