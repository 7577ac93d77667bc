"""
Nix Adapter

Architectural Intent:
- Infrastructure adapters over the local Nix CLI
- NixAdapter reads the deploy configuration from the flake (`nix eval`)
- NixHashAdapter hashes the tree with `nix-hash`
- Uses subprocess for Nix CLI operations wrapped in async
"""

import asyncio
import json
import logging
import subprocess
from pathlib import Path
from typing import Any

from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.errors import DeployConfigError, TreeUnreadable
from henix.domain.ports.content_hasher_port import ContentHasherPort
from henix.domain.ports.deploy_config_port import DeployConfigPort
from henix.domain.value_objects.identifier import Identifier

logger = logging.getLogger(__name__)


class NixAdapter(DeployConfigPort):
    def __init__(self, attribute: str = ".#deploy"):
        self.attribute = attribute

    async def eval(self, config_dir: Path, arg: str) -> Any:
        """Equivalent to `nix eval --json -- <arg>` run inside `config_dir`."""

        def _eval():
            try:
                result = subprocess.run(
                    ["nix", "eval", "--json", "--", arg],
                    cwd=str(config_dir),
                    capture_output=True,
                    text=True,
                    check=True,
                )
            except FileNotFoundError:
                raise DeployConfigError(
                    "`nix` not found; install Nix or list the nodes in henix.json"
                )
            except subprocess.CalledProcessError as e:
                raise DeployConfigError(
                    f"Could not execute `nix eval {arg}` command, with stderr:\n{e.stderr}"
                )
            try:
                return json.loads(result.stdout)
            except json.JSONDecodeError as e:
                raise DeployConfigError(f"`{arg}` did not evaluate to JSON: {e}")

        return await asyncio.get_event_loop().run_in_executor(None, _eval)

    async def load_nodes(self, config_dir: Path) -> dict[str, dict[str, Any]]:
        deploy_cfg = await self.eval(config_dir, self.attribute)
        if not isinstance(deploy_cfg, dict) or not isinstance(deploy_cfg.get("nodes"), dict):
            raise DeployConfigError(
                f"`{self.attribute}` does not match schema: expected an attribute set "
                "with a `nodes` attribute set"
            )
        logger.debug("Found %d node(s) in %s", len(deploy_cfg["nodes"]), self.attribute)
        return deploy_cfg["nodes"]


class NixHashAdapter(ContentHasherPort):
    """Equivalent to `nix-hash --type sha256 <dir>`.

    nix-hash serialises the whole directory, version-control metadata
    included, so edits under `.git/` also produce a new identifier.
    """

    async def hash_tree(self, tree: ConfigurationTree) -> Identifier:
        def _hash():
            try:
                result = subprocess.run(
                    ["nix-hash", "--type", "sha256", str(tree.root)],
                    capture_output=True,
                    text=True,
                    check=True,
                )
            except FileNotFoundError:
                raise TreeUnreadable(str(tree.root), "`nix-hash` not found")
            except subprocess.CalledProcessError as e:
                raise TreeUnreadable(
                    str(tree.root), f"nix-hash exited with {e.returncode}: {e.stderr}"
                )
            return Identifier(result.stdout.strip())

        return await asyncio.get_event_loop().run_in_executor(None, _hash)
