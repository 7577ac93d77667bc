"""Tests for the Nix CLI adapters."""

import subprocess
import pytest
from unittest.mock import patch, MagicMock
from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.errors import DeployConfigError, TreeUnreadable
from henix.infrastructure.adapters.nix_adapter import NixAdapter, NixHashAdapter


def _completed(stdout):
    result = MagicMock()
    result.stdout = stdout
    result.returncode = 0
    return result


class TestNixAdapter:
    @pytest.mark.asyncio
    async def test_load_nodes(self, tmp_path):
        adapter = NixAdapter()
        payload = '{"nodes": {"web": {"location": "10.0.0.1"}}}'
        with patch("subprocess.run", return_value=_completed(payload)) as mock_run:
            nodes = await adapter.load_nodes(tmp_path)
        assert nodes == {"web": {"location": "10.0.0.1"}}
        args, kwargs = mock_run.call_args
        assert args[0] == ["nix", "eval", "--json", "--", ".#deploy"]
        assert kwargs["cwd"] == str(tmp_path)

    @pytest.mark.asyncio
    async def test_custom_attribute(self, tmp_path):
        adapter = NixAdapter(attribute=".#fleet")
        with patch("subprocess.run", return_value=_completed('{"nodes": {}}')) as mock_run:
            await adapter.load_nodes(tmp_path)
        assert mock_run.call_args.args[0][-1] == ".#fleet"

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, tmp_path):
        with patch("subprocess.run", return_value=_completed('{"hosts": []}')):
            with pytest.raises(DeployConfigError, match="does not match schema"):
                await NixAdapter().load_nodes(tmp_path)

    @pytest.mark.asyncio
    async def test_eval_failure(self, tmp_path):
        error = subprocess.CalledProcessError(1, ["nix"], stderr="attribute 'deploy' missing")
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(DeployConfigError, match="attribute 'deploy' missing"):
                await NixAdapter().load_nodes(tmp_path)

    @pytest.mark.asyncio
    async def test_nix_not_installed(self, tmp_path):
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(DeployConfigError, match="not found"):
                await NixAdapter().load_nodes(tmp_path)

    @pytest.mark.asyncio
    async def test_invalid_json(self, tmp_path):
        with patch("subprocess.run", return_value=_completed("not json")):
            with pytest.raises(DeployConfigError, match="JSON"):
                await NixAdapter().eval(tmp_path, ".#deploy")


class TestNixHashAdapter:
    @pytest.mark.asyncio
    async def test_hash(self, config_tree):
        tree = ConfigurationTree.scan(config_tree)
        with patch("subprocess.run", return_value=_completed("a" * 64 + "\n")) as mock_run:
            identifier = await NixHashAdapter().hash_tree(tree)
        assert identifier.value == "a" * 64
        assert mock_run.call_args.args[0] == [
            "nix-hash", "--type", "sha256", str(tree.root)
        ]

    @pytest.mark.asyncio
    async def test_missing_binary(self, config_tree):
        tree = ConfigurationTree.scan(config_tree)
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(TreeUnreadable, match="nix-hash"):
                await NixHashAdapter().hash_tree(tree)

    @pytest.mark.asyncio
    async def test_failure(self, config_tree):
        tree = ConfigurationTree.scan(config_tree)
        error = subprocess.CalledProcessError(1, ["nix-hash"], stderr="permission denied")
        with patch("subprocess.run", side_effect=error):
            with pytest.raises(TreeUnreadable, match="permission denied"):
                await NixHashAdapter().hash_tree(tree)
