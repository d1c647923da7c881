"""Exception hierarchy for mcp-server-manager.

All exceptions inherit from McpManagerError (single catch point).
Messages are written for the operator -- clear, actionable, no stack traces.
"""

from __future__ import annotations


class McpManagerError(Exception):
    """Base exception for all mcp-server-manager errors."""


# ─── Server definition validation ─────────────────────────────


class ServerValidationError(McpManagerError):
    """A server definition is not well-formed."""


class EmptyServerNameError(ServerValidationError):
    def __init__(self) -> None:
        super().__init__("server name cannot be empty")


class NoTransportTypeError(ServerValidationError):
    def __init__(self) -> None:
        super().__init__("server must have exactly one transport type: command, url, or httpUrl")


class MultipleTransportTypesError(ServerValidationError):
    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"server must have exactly one transport type, found {count}")


class CommandNotFoundError(ServerValidationError):
    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"command '{command}' not found in PATH")


class InvalidURLError(ServerValidationError):
    """URL transport value could not be accepted."""

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"invalid URL '{url}': {reason}")


class MissingSchemeError(InvalidURLError):
    def __init__(self, url: str) -> None:
        super().__init__(url, "URL missing scheme")


class MissingHostError(InvalidURLError):
    def __init__(self, url: str) -> None:
        super().__init__(url, "URL missing host")


class UnsupportedSchemeError(InvalidURLError):
    def __init__(self, url: str, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(url, f"URL scheme must be http or https, got {scheme}")


class NegativeTimeoutError(ServerValidationError):
    def __init__(self, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(f"timeout cannot be negative (got {timeout})")


class EmptyEnvKeyError(ServerValidationError):
    def __init__(self) -> None:
        super().__init__("environment variable key cannot be empty")


class EnvKeyContainsEqualsError(ServerValidationError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"environment variable key '{key}' cannot contain '='")


class EmptyEnvValueError(ServerValidationError):
    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"environment variable value for '{key}' cannot be empty")


# ─── Whole-registry validation ────────────────────────────────


class RegistryValidationError(McpManagerError):
    """The registry as a whole violates an invariant."""


class InvalidPortError(RegistryValidationError):
    def __init__(self, port: object) -> None:
        self.port = port
        super().__init__(f"invalid server port: {port}")


class NoServersError(RegistryValidationError):
    def __init__(self) -> None:
        super().__init__("no MCP servers configured")


class NoClientsError(RegistryValidationError):
    def __init__(self) -> None:
        super().__init__("no clients configured")


class InvalidServerError(RegistryValidationError):
    """A registry server failed its individual validation."""

    def __init__(self, server: str, cause: ServerValidationError) -> None:
        self.server = server
        self.cause = cause
        super().__init__(f"invalid MCP server '{server}': {cause}")


class InvalidClientError(RegistryValidationError):
    def __init__(self, client: str, reason: str) -> None:
        self.client = client
        self.reason = reason
        super().__init__(f"invalid client '{client}': {reason}")


class DanglingServerReferenceError(RegistryValidationError):
    def __init__(self, client: str, server: str) -> None:
        self.client = client
        self.server = server
        super().__init__(f"client '{client}' references non-existent server '{server}'")


class InvalidClientConfigError(McpManagerError):
    """A server entry inside a client's own config file is malformed."""

    def __init__(self, server: str, cause: ServerValidationError) -> None:
        self.server = server
        self.cause = cause
        super().__init__(f"client config validation failed: server '{server}': {cause}")


# ─── Lookups ──────────────────────────────────────────────────


class ClientNotFoundError(McpManagerError):
    def __init__(self, client: str) -> None:
        self.client = client
        super().__init__(f"client '{client}' not found")


class ServerNotFoundError(McpManagerError):
    def __init__(self, server: str) -> None:
        self.server = server
        super().__init__(f"MCP server '{server}' not found")


class DuplicateServerNameError(McpManagerError):
    def __init__(self, server: str) -> None:
        self.server = server
        super().__init__(f"server with name '{server}' already exists")


# ─── I/O ──────────────────────────────────────────────────────


class ConfigReadError(McpManagerError):
    """Error reading an MCP client config file."""


class MalformedClientConfigError(ConfigReadError):
    """Client config file exists but is not a JSON object."""


class ConfigWriteError(McpManagerError):
    """Error writing to an MCP client config file."""


class BackupError(ConfigWriteError):
    """Could not back up a client config file before overwriting it."""


class RegistryLoadError(McpManagerError):
    """Error reading or parsing the central registry file."""


class RegistrySaveError(McpManagerError):
    """Error writing the central registry file."""


class SyncError(McpManagerError):
    """One or more clients could not be reconciled with the registry.

    ``failures`` maps client id to the error that stopped that client.
    Clients not listed were written successfully.
    """

    def __init__(self, failures: dict[str, McpManagerError]) -> None:
        self.failures = dict(failures)
        detail = "; ".join(f"{client}: {exc}" for client, exc in self.failures.items())
        super().__init__(
            f"failed to sync {len(self.failures)} client(s): {detail}. "
            "Fix the listed files and run the sync again."
        )
