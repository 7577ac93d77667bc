"""
Fabric Adapter

Architectural Intent:
- Infrastructure adapter implementing RemoteExecutorPort via Fabric/SSH
- One connection per call, closed afterwards; calls run in the default
  executor so a long build on one host does not hold up the others
- Remote stdout/stderr is proxied to the logger line by line while the
  command runs, and also captured for the deployment report

Security:
- SSH connections use connect_timeout, allow_agent, look_for_keys
- Non-root users go through sudo, with the command wrapped in `sh -c`;
  paths are quoted with shlex.quote()
"""

import asyncio
import logging
import shlex
from typing import Optional

from fabric import Connection
from paramiko.ssh_exception import SSHException

from henix.domain.errors import RemoteExecutionError, TargetUnreachable
from henix.domain.ports.remote_executor_port import RemoteExecutorPort
from henix.domain.value_objects.command_result import CommandResult
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)


class LogStream:
    """File-like sink handing each complete line to the logger."""

    def __init__(self, node: str, stream: str, log: logging.Logger = logger):
        self.node = node
        self.stream = stream
        self.log = log
        self._pending = ""

    def write(self, data: str) -> int:
        self._pending += data
        while "\n" in self._pending:
            line, self._pending = self._pending.split("\n", 1)
            self.log.info("[%s] %s: %s", self.node, self.stream, line.rstrip("\r"))
        return len(data)

    def flush(self) -> None:
        if self._pending:
            self.log.info("[%s] %s: %s", self.node, self.stream, self._pending)
            self._pending = ""


class FabricAdapter(RemoteExecutorPort):
    """Adapter implementing RemoteExecutorPort via Fabric/SSH."""

    def __init__(self, connect_timeout: int = 30, command_timeout: Optional[int] = None):
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

    def _get_connection(self, target: Target) -> Connection:
        return Connection(
            host=target.host,
            user=target.user,
            port=target.port,
            connect_timeout=self.connect_timeout,
            connect_kwargs={
                "allow_agent": True,
                "look_for_keys": True,
            },
        )

    def _run_sync(self, target: Target, command: str, stream: bool) -> CommandResult:
        conn = self._get_connection(target)
        kwargs = {"warn": True, "timeout": self.command_timeout}
        if stream:
            out = LogStream(target.name, "stdout")
            err = LogStream(target.name, "stderr")
            kwargs.update(hide=False, out_stream=out, err_stream=err)
        else:
            kwargs.update(hide=True)

        try:
            if target.user == "root":
                result = conn.run(command, **kwargs)
            else:
                # sudo elevates only the first word; the whole line runs under one shell
                result = conn.sudo(f"sh -c {shlex.quote(command)}", **kwargs)
        except (OSError, SSHException) as e:
            raise TargetUnreachable(target.host, str(e)) from e
        except Exception as e:
            raise RemoteExecutionError(target.host, command, str(e)) from e
        finally:
            if stream:
                out.flush()
                err.flush()
            conn.close()

        return CommandResult(
            exit_code=result.return_code,
            stdout=result.stdout,
            stderr=result.stderr,
        )

    async def run(self, target: Target, command: str) -> CommandResult:
        logger.debug("[%s] exec: %s", target.name, command)
        return await asyncio.get_event_loop().run_in_executor(
            None, self._run_sync, target, command, True
        )

    async def path_exists(self, target: Target, path: str) -> bool:
        result = await asyncio.get_event_loop().run_in_executor(
            None, self._run_sync, target, f"test -e {shlex.quote(path)}", False
        )
        return result.ok
