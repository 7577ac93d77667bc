"""
Deploy Config Port

Architectural Intent:
- Port interface for discovering the nodes of a deployment
- Implemented by NixAdapter (`nix eval --json .#deploy`)
"""

from typing import Any, Protocol, runtime_checkable
from pathlib import Path


@runtime_checkable
class DeployConfigPort(Protocol):
    async def load_nodes(self, config_dir: Path) -> dict[str, dict[str, Any]]:
        """Return the node map `{name: {"location": ..., "sshPort": ...}}`."""
        ...
