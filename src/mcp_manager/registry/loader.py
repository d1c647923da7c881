"""Load and save the central registry YAML document.

Document shape:

    server_port: 6543
    mcpServers:
      <name>: { ...fields passed through to clients... }
    clients:
      <id>:
        config_path: ~/.claude.json
        enabled: [<name>, ...]

Server order is the mapping order in the file and survives a save.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path

import yaml

from mcp_manager.errors import RegistryLoadError, RegistrySaveError
from mcp_manager.models import DEFAULT_SERVER_PORT, ClientDefinition, Registry, ServerDefinition

logger = logging.getLogger(__name__)

USER_REGISTRY_PATH = "~/.config/mcp-server-manager/config.yaml"
DEFAULT_REGISTRY_PATH = "configs/config.yaml"

DEFAULT_REGISTRY_TEMPLATE = """\
# MCP Server Manager configuration
# Edit this file to configure your MCP servers and clients.

server_port: 6543

# Server names are keys; every field is passed through to client configs unchanged.
mcpServers:
  # STDIO transport (local process)
  filesystem:
    command: "npx"
    args: ["@modelcontextprotocol/server-filesystem", "/path/to/your/directory"]
    env:
      NODE_ENV: "production"
    timeout: 30000
    trust: false

  # HTTP transport with a type field (VS Code style)
  context7-vscode:
    type: "http"
    url: "https://mcp.context7.com/mcp"
    headers:
      CONTEXT7_API_KEY: "ADD_YOUR_API_KEY"
      Accept: "application/json, text/event-stream"
    timeout: 10000

  # HTTP transport, httpUrl variant (Gemini CLI style)
  context7-gemini:
    httpUrl: "https://mcp.context7.com/mcp"
    headers:
      CONTEXT7_API_KEY: "ADD_YOUR_API_KEY"
      Accept: "application/json, text/event-stream"

# Which servers each client gets.
clients:
  claude_code:
    config_path: "~/.claude.json"
    enabled:
      - filesystem

  gemini_cli:
    config_path: "~/.gemini/settings.json"
    enabled: []
"""


def expand_path(path: str | Path) -> Path:
    """Resolve a leading ``~`` to the user's home directory."""
    return Path(path).expanduser()


def resolve_registry_path(explicit: str = "") -> Path:
    """Find the registry file, creating one from the template when needed.

    An explicit path is used as-is (created if missing). Otherwise the first
    existing file among the user config, ``./config.yaml`` and
    ``configs/config.yaml`` wins, falling back to creating the user config.
    """
    if explicit:
        path = expand_path(explicit)
        if not path.exists():
            create_default_registry(path)
        return path

    candidates = [expand_path(USER_REGISTRY_PATH), Path("config.yaml"), Path(DEFAULT_REGISTRY_PATH)]
    for candidate in candidates:
        if candidate.exists():
            return candidate

    path = expand_path(USER_REGISTRY_PATH)
    create_default_registry(path)
    return path


def create_default_registry(path: Path) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(DEFAULT_REGISTRY_TEMPLATE, encoding="utf-8")
    except OSError as exc:
        raise RegistrySaveError(f"Could not create default registry at {path}: {exc}") from exc
    logger.info("Created default registry at %s; edit it to configure your servers", path)


def load_registry(path: Path | str) -> Registry:
    """Read and parse the registry document at *path*."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RegistryLoadError(f"Failed to read registry {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise RegistryLoadError(f"Registry {path} is not valid UTF-8: {exc}") from exc

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RegistryLoadError(f"Invalid YAML in {path}: {exc}") from exc

    return parse_registry(data, source=str(path))


def parse_registry(data: object, source: str = "") -> Registry:
    """Build a Registry from an already-decoded document."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise RegistryLoadError(f"Invalid registry format in {source}: expected a mapping.")

    servers_data = data.get("mcpServers") or {}
    if not isinstance(servers_data, dict):
        raise RegistryLoadError(
            f"Invalid registry format in {source}: 'mcpServers' must be a mapping."
        )

    servers: list[ServerDefinition] = []
    for name, config in servers_data.items():
        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise RegistryLoadError(
                f"Invalid registry format in {source}: server '{name}' must be a mapping."
            )
        servers.append(ServerDefinition(name=str(name), config=config))

    clients_data = data.get("clients") or {}
    if not isinstance(clients_data, dict):
        raise RegistryLoadError(
            f"Invalid registry format in {source}: 'clients' must be a mapping."
        )

    clients: dict[str, ClientDefinition] = {}
    for client_id, entry in clients_data.items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise RegistryLoadError(
                f"Invalid registry format in {source}: client '{client_id}' must be a mapping."
            )
        enabled = entry.get("enabled") or []
        if not isinstance(enabled, list):
            raise RegistryLoadError(
                f"Invalid registry format in {source}: "
                f"'clients.{client_id}.enabled' must be a list."
            )
        clients[str(client_id)] = ClientDefinition(
            config_path=str(entry.get("config_path") or ""),
            enabled=[str(name) for name in enabled],
        )

    port = data.get("server_port") or DEFAULT_SERVER_PORT
    return Registry(servers=servers, clients=clients, server_port=port)


def registry_to_dict(registry: Registry) -> dict[str, object]:
    """Serialize a Registry into the YAML document shape, keeping server order."""
    return {
        "server_port": registry.server_port,
        "mcpServers": {server.name: server.config for server in registry.servers},
        "clients": {
            client_id: {"config_path": client.config_path, "enabled": list(client.enabled)}
            for client_id, client in registry.clients.items()
        },
    }


def save_registry(path: Path | str, registry: Registry) -> None:
    """Write the registry atomically: write to unique temp file, then os.replace()."""
    path = Path(path)
    content = yaml.safe_dump(
        registry_to_dict(registry),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )

    fd = None
    tmp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent), suffix=".tmp", prefix=f".{path.stem}_"
        )
        os.write(fd, content.encode("utf-8"))
        os.close(fd)
        fd = None
        os.replace(tmp_path, str(path))
        tmp_path = None
    except OSError as exc:
        raise RegistrySaveError(f"Failed to write registry {path}: {exc}") from exc
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)


class YamlRegistryStore:
    """RegistryStorePort backed by a YAML file."""

    def __init__(self, path: Path | str) -> None:
        self._path = expand_path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Registry:
        return load_registry(self._path)

    def save(self, registry: Registry) -> None:
        save_registry(self._path, registry)
        logger.debug("Saved registry to %s", self._path)
