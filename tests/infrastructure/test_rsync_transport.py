"""Tests for RsyncTransport."""

import subprocess
import pytest
from unittest.mock import patch, MagicMock
from henix.application.services.remote_store_layout import resolve_slot
from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.errors import TargetUnreachable, TransferError
from henix.domain.value_objects.identifier import Identifier
from henix.domain.value_objects.target import Target
from henix.infrastructure.adapters.rsync_transport import RsyncTransport

ID = Identifier("0123456789abcdef" * 4)


def _completed(code=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = code
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestBuildCommand:
    def test_root_target(self, config_tree, target_b):
        tree = ConfigurationTree.scan(config_tree)
        cmd = RsyncTransport().build_command(tree, target_b, resolve_slot(target_b.host, ID))
        assert cmd == [
            "rsync",
            "--exclude=.git/",
            "-a",
            "--delete",
            "--mkpath",
            "-e",
            "ssh -p 2222",
            f"{tree.root}/",
            f"root@10.0.0.2:/etc/henix/{ID}",
        ]

    def test_non_root_uses_sudo_rsync(self, config_tree):
        target = Target(name="web", host="web.example.com", user="deploy")
        tree = ConfigurationTree.scan(config_tree)
        cmd = RsyncTransport().build_command(tree, target, resolve_slot(target.host, ID))
        idx = cmd.index("--rsync-path")
        assert cmd[idx + 1] == "sudo rsync"
        assert cmd[-1] == f"deploy@web.example.com:/etc/henix/{ID}"

    def test_ipv6_destination(self, config_tree):
        target = Target(name="v6", host="fe80::1")
        tree = ConfigurationTree.scan(config_tree)
        cmd = RsyncTransport().build_command(tree, target, resolve_slot(target.host, ID))
        assert cmd[-1] == f"root@[fe80::1]:/etc/henix/{ID}"

    def test_custom_binary(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        cmd = RsyncTransport(rsync_path="/opt/bin/rsync").build_command(
            tree, target_a, resolve_slot(target_a.host, ID)
        )
        assert cmd[0] == "/opt/bin/rsync"


class TestSyncTree:
    @pytest.mark.asyncio
    async def test_success(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        with patch("subprocess.run", return_value=_completed(0)) as mock_run:
            await RsyncTransport(timeout=30).sync_tree(
                tree, target_a, resolve_slot(target_a.host, ID)
            )
        assert mock_run.call_args.kwargs["timeout"] == 30

    @pytest.mark.asyncio
    async def test_ssh_failure_is_unreachable(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        failed = _completed(255, stderr="ssh: connect to host 10.0.0.1 port 22: No route to host")
        with patch("subprocess.run", return_value=failed):
            with pytest.raises(TargetUnreachable, match="No route to host"):
                await RsyncTransport().sync_tree(tree, target_a, resolve_slot(target_a.host, ID))

    @pytest.mark.asyncio
    async def test_rsync_failure(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        failed = _completed(23, stderr="Permission denied")
        with patch("subprocess.run", return_value=failed):
            with pytest.raises(TransferError) as exc_info:
                await RsyncTransport().sync_tree(tree, target_a, resolve_slot(target_a.host, ID))
        assert exc_info.value.exit_code == 23
        assert exc_info.value.output == "Permission denied"
        assert not isinstance(exc_info.value, TargetUnreachable)

    @pytest.mark.asyncio
    async def test_rsync_missing(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(TransferError, match="not found"):
                await RsyncTransport().sync_tree(tree, target_a, resolve_slot(target_a.host, ID))

    @pytest.mark.asyncio
    async def test_timeout(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(["rsync"], 5)):
            with pytest.raises(TransferError, match="timed out"):
                await RsyncTransport().sync_tree(tree, target_a, resolve_slot(target_a.host, ID))

    @pytest.mark.asyncio
    async def test_repeat_sync_reuses_the_same_destination(self, config_tree, target_a):
        tree = ConfigurationTree.scan(config_tree)
        slot = resolve_slot(target_a.host, ID)
        transport = RsyncTransport()
        with patch("subprocess.run", return_value=_completed(0)) as mock_run:
            await transport.sync_tree(tree, target_a, slot)
            await transport.sync_tree(tree, target_a, slot)
        first, second = (c.args[0] for c in mock_run.call_args_list)
        assert first == second
        assert first[-1] == f"root@10.0.0.1:/etc/henix/{ID}"
        assert "--delete" in first
        assert "--ignore-existing" not in first
