"""Read MCP client config files with schema tolerance.

Client files follow: { "mcpServers": { "<name>": { ... } }, ...foreign keys... }
We own only "mcpServers" and preserve everything else on write.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from mcp_manager.errors import ConfigReadError, MalformedClientConfigError

logger = logging.getLogger(__name__)

MANAGED_KEY = "mcpServers"


def read_config(config_path: Path | str) -> dict[str, object]:
    """Read a full MCP client config file.

    Returns the raw dict so the writer can round-trip unknown keys.
    A missing or blank file reads as ``{"mcpServers": {}}``; nothing is
    written to disk here.
    """
    path = Path(config_path)
    if not path.exists():
        logger.debug("Client config %s does not exist yet, starting empty", path)
        return {MANAGED_KEY: {}}

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(f"Failed to read client config {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise MalformedClientConfigError(f"Client config {path} is not valid UTF-8: {exc}") from exc

    if not text.strip():
        return {MANAGED_KEY: {}}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedClientConfigError(
            f"Invalid JSON in {path}: {exc}. Fix the JSON syntax or delete the file to start fresh."
        ) from exc

    if not isinstance(data, dict):
        raise MalformedClientConfigError(
            f"Invalid client config {path}: expected a JSON object, got {type(data).__name__}."
        )

    if not isinstance(data.get(MANAGED_KEY), dict):
        data[MANAGED_KEY] = {}
    return data


def managed_servers(raw_config: dict[str, object]) -> dict[str, object]:
    """The ``mcpServers`` mapping of an already-read config."""
    servers = raw_config.get(MANAGED_KEY)
    if not isinstance(servers, dict):
        servers = {}
        raw_config[MANAGED_KEY] = servers
    return servers
