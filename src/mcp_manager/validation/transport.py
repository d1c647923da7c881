"""Validate MCP server definitions.

A server declares exactly one transport: ``command`` (local process),
``url`` or ``httpUrl`` (remote endpoint). Checks run in a fixed order and the
first failure is raised:

  name -> transport count -> transport value -> timeout -> env
"""

from __future__ import annotations

import shutil
from collections.abc import Callable, Mapping
from urllib.parse import urlparse

from mcp_manager.errors import (
    CommandNotFoundError,
    EmptyEnvKeyError,
    EmptyEnvValueError,
    EmptyServerNameError,
    EnvKeyContainsEqualsError,
    InvalidClientConfigError,
    InvalidURLError,
    MissingHostError,
    MissingSchemeError,
    MultipleTransportTypesError,
    NegativeTimeoutError,
    NoTransportTypeError,
    ServerValidationError,
    UnsupportedSchemeError,
)
from mcp_manager.models import TransportKind, TransportSpec

CommandResolver = Callable[[str], str | None]

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def detect_transport(config: Mapping[str, object]) -> TransportSpec:
    """Return the single transport declared by *config*.

    A candidate key counts only when its value is a string that is not
    blank after trimming.
    """
    found: list[TransportSpec] = []
    for kind in TransportKind:
        value = config.get(kind.value)
        if isinstance(value, str) and value.strip():
            found.append(TransportSpec(kind=kind, value=value.strip()))

    if not found:
        raise NoTransportTypeError()
    if len(found) > 1:
        raise MultipleTransportTypesError(len(found))
    return found[0]


def validate_url(url: str) -> None:
    """Accept only absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise InvalidURLError(url, str(exc)) from exc

    if not parsed.scheme:
        raise MissingSchemeError(url)
    if not parsed.netloc:
        raise MissingHostError(url)
    if parsed.scheme not in _ALLOWED_SCHEMES:
        raise UnsupportedSchemeError(url, parsed.scheme)


def validate_transport_value(spec: TransportSpec, which: CommandResolver = shutil.which) -> None:
    if spec.kind is TransportKind.COMMAND:
        if which(spec.value) is None:
            raise CommandNotFoundError(spec.value)
        return
    validate_url(spec.value)


def validate_timeout(config: Mapping[str, object]) -> None:
    timeout = config.get("timeout")
    # bool is an int subclass but never a timeout
    if isinstance(timeout, bool) or not isinstance(timeout, int | float):
        return
    if timeout < 0:
        raise NegativeTimeoutError(timeout)


def validate_env(config: Mapping[str, object]) -> None:
    env = config.get("env")
    if not isinstance(env, Mapping):
        return

    for key, value in env.items():
        key = str(key)
        if not key.strip():
            raise EmptyEnvKeyError()
        if "=" in key:
            raise EnvKeyContainsEqualsError(key)
        if not isinstance(value, str) or not value.strip():
            raise EmptyEnvValueError(key)


def validate_server(
    name: str,
    config: Mapping[str, object],
    *,
    which: CommandResolver = shutil.which,
) -> TransportSpec:
    """Validate one server definition and return its transport.

    Raises:
        ServerValidationError: The first rule the definition breaks.
    """
    if not name.strip():
        raise EmptyServerNameError()

    spec = detect_transport(config)
    validate_transport_value(spec, which)
    validate_timeout(config)
    validate_env(config)
    return spec


def validate_client_servers(blob: Mapping[str, object]) -> None:
    """Hold server entries found in a client's own file to the transport contract.

    Only transport detection runs here: a client file may legitimately
    reference commands that live on another machine's PATH. Entries that
    are not mappings are left alone.
    """
    servers = blob.get("mcpServers")
    if not isinstance(servers, Mapping):
        return

    for name, entry in servers.items():
        if not str(name).strip():
            raise InvalidClientConfigError(str(name), EmptyServerNameError())
        if not isinstance(entry, Mapping):
            continue
        try:
            detect_transport(entry)
        except ServerValidationError as exc:
            raise InvalidClientConfigError(str(name), exc) from exc
