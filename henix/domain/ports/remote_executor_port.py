"""
Remote Executor Port

Architectural Intent:
- Port interface for executing commands on remote infrastructure
- Commands run once, with elevated privileges, and report their exit code
- Implemented by adapters (Fabric, in-memory fakes for tests)
"""

from abc import ABC, abstractmethod
from henix.domain.value_objects.command_result import CommandResult
from henix.domain.value_objects.target import Target


class RemoteExecutorPort(ABC):
    """
    Port interface for executing commands on remote infrastructure.
    """

    @abstractmethod
    async def run(self, target: Target, command: str) -> CommandResult:
        """
        Executes a shell command on the target and waits for it to finish.
        A non-zero exit is reported in the result, not raised.
        Raises TargetUnreachable or RemoteExecutionError if the command
        could not be run.
        """
        pass

    @abstractmethod
    async def path_exists(self, target: Target, path: str) -> bool:
        """
        Returns True if `path` exists on the target.
        """
        pass
