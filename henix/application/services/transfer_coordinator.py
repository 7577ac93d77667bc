"""
Transfer Coordinator

Architectural Intent:
- Drives the file transport for one target
- Passes the tree through untouched: the slot is named by the tree's hash,
  so filtering here would make the name lie about the content
- Never retries; retry policy belongs to the operator
"""

import logging

from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.errors import TransferError
from henix.domain.ports.file_transport_port import FileTransportPort
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)


class TransferCoordinator:
    def __init__(self, transport: FileTransportPort):
        self.transport = transport

    async def transfer(
        self, tree: ConfigurationTree, target: Target, slot: RemoteSlot
    ) -> None:
        if slot.host != target.host:
            raise ValueError(f"Slot {slot} does not belong to {target}")

        logger.info("Copying %s to %s:%s", tree.root, target.name, slot.path)
        try:
            await self.transport.sync_tree(tree, target, slot)
        except TransferError:
            raise
        except OSError as e:
            raise TransferError(target.host, str(e)) from e
        logger.info("Copying to %s finished", target.name)
