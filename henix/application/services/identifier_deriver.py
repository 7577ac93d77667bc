"""
Identifier Deriver

Architectural Intent:
- Computes the single Identifier shared by every target of a run
- Runs before any network activity; TreeUnreadable aborts the run
"""

import logging
from pathlib import Path

from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.ports.content_hasher_port import ContentHasherPort
from henix.domain.value_objects.identifier import Identifier

logger = logging.getLogger(__name__)


class IdentifierDeriver:
    def __init__(self, hasher: ContentHasherPort):
        self.hasher = hasher

    async def derive(self, tree: ConfigurationTree) -> Identifier:
        identifier = await self.hasher.hash_tree(tree)
        logger.info(
            "Configuration %s hashed to %s (%d entries, %d bytes)",
            tree.root,
            identifier,
            len(tree.entries),
            tree.total_size,
        )
        return identifier

    async def derive_path(self, root: Path) -> tuple[ConfigurationTree, Identifier]:
        """Scan `root` and derive its identifier."""
        tree = ConfigurationTree.scan(root)
        return tree, await self.derive(tree)
