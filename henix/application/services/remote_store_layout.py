"""
Remote Store Layout

Architectural Intent:
- Maps an Identifier to its slot on a host (pure, no I/O)
- Optionally checks whether the slot already holds a finished copy so
  unchanged configurations are not copied again
- A slot counts as finished only once its completion marker
  (`<slot>.done`, next to the slot) has been written after a transfer;
  a bare slot directory left by an interrupted transfer is re-synced

The check is advisory. A failed check counts as "absent" and the transfer
simply runs; the transport is idempotent either way.
"""

import logging
import posixpath
import shlex

from henix.domain.ports.remote_executor_port import RemoteExecutorPort
from henix.domain.value_objects.identifier import Identifier
from henix.domain.value_objects.remote_slot import DEFAULT_BASE_DIR, RemoteSlot
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)


def resolve_slot(
    host: str, identifier: Identifier, base_dir: str = DEFAULT_BASE_DIR
) -> RemoteSlot:
    return RemoteSlot(host=host, base_dir=base_dir, identifier=identifier)


class RemoteStoreLayout:
    def __init__(self, remote_executor: RemoteExecutorPort, base_dir: str = DEFAULT_BASE_DIR):
        if not posixpath.isabs(base_dir):
            raise ValueError(f"Slot base directory must be absolute: {base_dir!r}")
        self.remote_executor = remote_executor
        self.base_dir = base_dir

    def resolve(self, target: Target, identifier: Identifier) -> RemoteSlot:
        return resolve_slot(target.host, identifier, self.base_dir)

    async def exists(self, target: Target, slot: RemoteSlot) -> bool:
        try:
            present = await self.remote_executor.path_exists(target, slot.marker_path)
        except Exception as e:
            logger.warning(
                "Could not check for %s on %s, assuming absent: %s",
                slot.path,
                target.name,
                e,
            )
            return False
        logger.debug("Slot %s on %s complete: %s", slot.path, target.name, present)
        return present

    async def mark_complete(self, target: Target, slot: RemoteSlot) -> bool:
        """
        Writes the completion marker for a slot whose transfer has finished.
        Failing to write it is not fatal: the next run copies the slot again.
        """
        try:
            result = await self.remote_executor.run(
                target, f"touch {shlex.quote(slot.marker_path)}"
            )
        except Exception as e:
            logger.warning("Could not mark %s complete on %s: %s", slot.path, target.name, e)
            return False
        if not result.ok:
            logger.warning(
                "Could not mark %s complete on %s (exit code %s)",
                slot.path,
                target.name,
                result.exit_code,
            )
            return False
        return True
