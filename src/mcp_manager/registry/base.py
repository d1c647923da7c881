"""Port: Registry persistence."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from mcp_manager.models import Registry


class RegistryStorePort(Protocol):
    """Port for loading and saving the central registry document."""

    @property
    def path(self) -> Path:
        """Location of the registry document."""
        ...

    def load(self) -> Registry:
        """Read the registry, preserving server order."""
        ...

    def save(self, registry: Registry) -> None:
        """Persist the registry atomically."""
        ...
