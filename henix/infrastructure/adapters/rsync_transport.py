"""
Rsync Transport

Architectural Intent:
- FileTransportPort implementation on top of rsync over ssh
- Syncs the *contents* of the tree into the slot in place; re-running with
  the same tree changes nothing, an interrupted run converges on retry
- Excludes exactly what ConfigurationTree excludes, so the slot content
  matches the identifier
"""

import asyncio
import logging
import os
import subprocess
from typing import Optional

from henix.domain.entities.configuration_tree import EXCLUDED_DIRS, ConfigurationTree
from henix.domain.errors import TargetUnreachable, TransferError
from henix.domain.ports.file_transport_port import FileTransportPort
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target

logger = logging.getLogger(__name__)

# rsync reports a failure of the remote shell as 255
SSH_FAILURE_EXIT = 255


class RsyncTransport(FileTransportPort):
    def __init__(self, rsync_path: str = "rsync", timeout: Optional[int] = 600):
        self.rsync_path = rsync_path
        self.timeout = timeout

    def build_command(
        self, tree: ConfigurationTree, target: Target, slot: RemoteSlot
    ) -> list[str]:
        # Trailing separator: copy the directory's contents, not the directory
        source = os.path.join(str(tree.root), "")
        cmd = [self.rsync_path]
        cmd += [f"--exclude={d}/" for d in EXCLUDED_DIRS]
        cmd += [
            "-a",  # archive: symlinks, permissions, times
            "--delete",  # drop remote files absent locally
            "--mkpath",  # mkdir -p the slot
            "-e",
            f"ssh -p {target.port}",
        ]
        if target.user != "root":
            cmd += ["--rsync-path", "sudo rsync"]
        cmd += [source, f"{target.address}:{slot.path}"]
        return cmd

    def _sync(self, tree: ConfigurationTree, target: Target, slot: RemoteSlot) -> None:
        cmd = self.build_command(tree, target, slot)
        logger.debug("[%s] exec: %s", target.name, " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise TransferError(target.host, f"`{self.rsync_path}` not found") from e
        except subprocess.TimeoutExpired as e:
            raise TransferError(target.host, f"rsync timed out after {e.timeout}s") from e

        for line in result.stdout.splitlines():
            logger.debug("[%s] rsync: %s", target.name, line)

        if result.returncode == SSH_FAILURE_EXIT:
            raise TargetUnreachable(
                target.host, result.stderr.strip() or "ssh failed", exit_code=SSH_FAILURE_EXIT
            )
        if result.returncode != 0:
            raise TransferError(
                target.host,
                f"rsync exited with {result.returncode}",
                exit_code=result.returncode,
                output=result.stderr,
            )

    async def sync_tree(
        self, tree: ConfigurationTree, target: Target, slot: RemoteSlot
    ) -> None:
        await asyncio.get_event_loop().run_in_executor(None, self._sync, tree, target, slot)
