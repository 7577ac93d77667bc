"""
Build Backend Port

Architectural Intent:
- Narrow capability interface over the remote build-and-switch tool
- Lets other configuration-management tools replace nixos-rebuild without
  touching transfer or fleet logic
"""

from abc import ABC, abstractmethod
from henix.domain.value_objects.build_outcome import BuildOutcome
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target


class BuildBackendPort(ABC):

    @abstractmethod
    async def build_and_activate(self, target: Target, slot: RemoteSlot) -> BuildOutcome:
        """
        Builds the configuration stored in `slot` and, only if the build
        succeeds, activates it as the target's current generation.
        """
        pass
