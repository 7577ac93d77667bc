"""
nixos-rebuild Backend

Architectural Intent:
- BuildBackendPort implementation for NixOS flakes
- One remote command: `nix build` the node's toplevel from the slot, and
  only if that succeeds run `nixos-rebuild switch|boot` on the same flake
- Activation failures exit with a reserved code so they can be told apart
  from build failures

Security:
- Slot path and node name are quoted with shlex.quote()
"""

import logging
import shlex

from henix.domain.ports.build_backend_port import BuildBackendPort
from henix.domain.ports.remote_executor_port import RemoteExecutorPort
from henix.domain.value_objects.build_outcome import BuildOutcome
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)

ACTIVATION_FAILED_EXIT = 97
OUTPUT_TAIL_LINES = 40
MODES = ("switch", "boot")


def _tail(text: str, lines: int = OUTPUT_TAIL_LINES) -> str:
    return "\n".join(text.splitlines()[-lines:])


class NixosRebuildBackend(BuildBackendPort):
    def __init__(
        self,
        remote_executor: RemoteExecutorPort,
        mode: str = "switch",
        show_trace: bool = False,
    ):
        if mode not in MODES:
            raise ValueError(f"Unknown rebuild mode {mode!r}, expected one of {MODES}")
        self.remote_executor = remote_executor
        self.mode = mode
        self.show_trace = show_trace

    def build_command(self, target: Target, slot: RemoteSlot) -> str:
        trace = " --show-trace" if self.show_trace else ""
        toplevel = shlex.quote(
            f'{slot.path}#nixosConfigurations."{target.name}".config.system.build.toplevel'
        )
        flake = shlex.quote(f"{slot.path}#{target.name}")
        return (
            f"nix build --no-link{trace} {toplevel}"
            f" && {{ nixos-rebuild {self.mode}{trace} --flake {flake}"
            f" || exit {ACTIVATION_FAILED_EXIT}; }}"
        )

    async def build_and_activate(self, target: Target, slot: RemoteSlot) -> BuildOutcome:
        result = await self.remote_executor.run(target, self.build_command(target, slot))
        output = _tail(result.output)
        if result.ok:
            return BuildOutcome.activated_ok(output)
        if result.exit_code == ACTIVATION_FAILED_EXIT:
            return BuildOutcome.activation_failed(result.exit_code, output)
        return BuildOutcome.build_failed(result.exit_code, output)
