"""
Domain Errors

Architectural Intent:
- Single exception hierarchy for everything henix raises on purpose
- Per-target errors carry the host they happened on so the fleet executor
  can record them against the right attempt
- Build and activation failures are outcomes, not exceptions
  (see BuildOutcome)
"""

from typing import Optional


class HenixError(Exception):
    """Base class for henix errors."""


class TreeUnreadable(HenixError):
    """The local configuration tree could not be read.

    Fatal for the whole run: raised before any host is contacted.
    """

    def __init__(self, root: str, reason: str) -> None:
        super().__init__(f"Configuration tree `{root}` is unreadable: {reason}")
        self.root = root
        self.reason = reason


class TransferError(HenixError):
    """Copying the configuration tree to a host failed."""

    def __init__(
        self,
        host: str,
        reason: str,
        exit_code: Optional[int] = None,
        output: str = "",
    ) -> None:
        super().__init__(f"Transfer to `{host}` failed: {reason}")
        self.host = host
        self.reason = reason
        self.exit_code = exit_code
        self.output = output


class TargetUnreachable(TransferError):
    """The host could not be reached over SSH."""

    def __str__(self) -> str:
        return f"Target `{self.host}` is unreachable: {self.reason}"


class RemoteExecutionError(HenixError):
    """A remote command could not be run at all (as opposed to exiting non-zero)."""

    def __init__(self, host: str, command: str, reason: str) -> None:
        super().__init__(f"Could not execute `{command}` on `{host}`: {reason}")
        self.host = host
        self.command = command
        self.reason = reason


class DeployConfigError(HenixError):
    """The deploy configuration (node list, target selection) is invalid."""
