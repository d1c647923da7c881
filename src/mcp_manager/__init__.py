"""mcp-server-manager: one MCP server registry, projected into every AI client."""

from __future__ import annotations

import argparse
import os
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _distribution_version

DISTRIBUTION_NAME = "mcp-server-manager"
_LOCAL_VERSION_FALLBACK = "0.0.0+local"


def _resolve_version() -> str:
    try:
        return _distribution_version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _LOCAL_VERSION_FALLBACK


__version__ = _resolve_version()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=DISTRIBUTION_NAME,
        description="Serve the MCP server registry and client sync tools over stdio.",
    )
    parser.add_argument(
        "-c",
        "--config",
        default="",
        help="registry file (default: $MCP_MANAGER_CONFIG, then the usual locations)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the `mcp-server-manager` CLI.

    ``--config`` wins over MCP_MANAGER_CONFIG; the lifespan reads the path
    from the environment when the server starts.
    """
    from mcp_manager.server import CONFIG_ENV_VAR, mcp

    args = _build_parser().parse_args(argv)
    if args.config:
        os.environ[CONFIG_ENV_VAR] = args.config
    mcp.run(transport="stdio")
