"""
Remote Build Invoker

Architectural Intent:
- Issues the single build-and-activate command for one target
- Reports build failures and activation failures as distinct outcomes,
  so "bad config" can be told apart from "bad machine"
- Errors reaching the host propagate to the fleet executor
"""

import logging

from henix.domain.ports.build_backend_port import BuildBackendPort
from henix.domain.value_objects.build_outcome import BuildOutcome, BuildOutcomeKind
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)


class BuildInvoker:
    def __init__(self, backend: BuildBackendPort):
        self.backend = backend

    async def build_and_activate(self, target: Target, slot: RemoteSlot) -> BuildOutcome:
        logger.info("Building %s on %s", slot.path, target.name)
        outcome = await self.backend.build_and_activate(target, slot)

        if outcome.kind is BuildOutcomeKind.ACTIVATED:
            logger.info("Finished building and activating config on %s", target.name)
        elif outcome.kind is BuildOutcomeKind.BUILD_FAILED:
            logger.error(
                "Build failed on %s (exit code %d); previous generation left active",
                target.name,
                outcome.exit_code,
            )
        else:
            logger.error(
                "Activation failed on %s (exit code %d) after a successful build",
                target.name,
                outcome.exit_code,
            )
        return outcome
