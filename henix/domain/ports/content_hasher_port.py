"""
Content Hasher Port

Architectural Intent:
- Port interface for fingerprinting a configuration tree
- Implementations must be deterministic and host independent
- Implemented by Sha256TreeHasher (in-process) or NixHashAdapter (nix-hash)
"""

from abc import ABC, abstractmethod
from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.value_objects.identifier import Identifier


class ContentHasherPort(ABC):
    """
    Port interface for deriving an Identifier from a ConfigurationTree.
    """

    @abstractmethod
    async def hash_tree(self, tree: ConfigurationTree) -> Identifier:
        """
        Hashes the tree. Raises TreeUnreadable if the content cannot be read.
        """
        pass
