"""
File Transport Port

Architectural Intent:
- Port interface for replicating a local tree into a remote directory
- Re-running with identical content must be a no-op, and the destination
  is synced in place rather than deleted and recreated
- Implemented by RsyncTransport
"""

from abc import ABC, abstractmethod
from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target


class FileTransportPort(ABC):

    @abstractmethod
    async def sync_tree(
        self, tree: ConfigurationTree, target: Target, slot: RemoteSlot
    ) -> None:
        """
        Copies the tree into the slot, creating parent directories.
        Raises TransferError (or TargetUnreachable) on failure.
        """
        pass
