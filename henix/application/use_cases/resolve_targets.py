"""
Resolve Targets Use Case

Architectural Intent:
- Turns the deploy configuration into the ordered list of Targets for a run
- Node map comes from the config file when it has one, otherwise from the
  flake (`nix eval --json .#deploy`)
- `--target` narrows the list; naming a node that does not exist is an error
"""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

from henix.domain.errors import DeployConfigError
from henix.domain.ports.deploy_config_port import DeployConfigPort
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)


class ResolveTargets:
    def __init__(self, deploy_config: DeployConfigPort, default_user: str = "root"):
        self.deploy_config = deploy_config
        self.default_user = default_user

    async def execute(
        self,
        config_dir: Path,
        selected: Optional[Sequence[str]] = None,
        nodes: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> list[Target]:
        if not nodes:
            logger.info("Gathering deploy information")
            nodes = await self.deploy_config.load_nodes(config_dir)

        if selected:
            for name in selected:
                if name not in nodes:
                    raise DeployConfigError(
                        f"Node name `{name}` (specified using --target) does not exist. "
                        "Did you remember to `git add` its configuration?"
                    )

        targets = []
        for name in sorted(nodes):
            if selected and name not in selected:
                continue
            try:
                targets.append(
                    Target.from_node_config(name, nodes[name], self.default_user)
                )
            except (TypeError, ValueError) as e:
                raise DeployConfigError(f"Invalid configuration for node `{name}`: {e}") from e
        return targets
