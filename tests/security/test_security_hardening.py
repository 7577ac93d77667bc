"""
Security Hardening Tests

Tests for:
- Target validation (node name, hostname, port, user)
- Identifier and slot path validation
- Shell injection prevention in remote commands
- OTEL config validation
"""

import shlex
import pytest
from unittest.mock import AsyncMock
from henix.application.services.remote_store_layout import resolve_slot
from henix.domain.value_objects.identifier import Identifier
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target
from henix.infrastructure.adapters.nixos_rebuild_backend import NixosRebuildBackend
from henix.infrastructure.telemetry.otel_exporter import OTELConfig

ID = Identifier("7" * 64)


class TestTargetValidation:
    @pytest.mark.parametrize("name", ["web; rm -rf /", "web$(id)", "we b", "a'b", 'a"b', ""])
    def test_shell_metacharacters_in_name_rejected(self, name):
        with pytest.raises(ValueError, match="Invalid node name"):
            Target(name=name, host="10.0.0.1")

    @pytest.mark.parametrize("host", ["host;id", "-oProxyCommand=id", "a b", "300.1.1.1"])
    def test_bad_hosts_rejected(self, host):
        with pytest.raises(ValueError, match="Invalid hostname"):
            Target(name="web", host=host)

    def test_port_too_high_rejected(self):
        with pytest.raises(ValueError, match="Port must be"):
            Target(name="web", host="10.0.0.1", port=70000)

    def test_empty_user_rejected(self):
        with pytest.raises(ValueError, match="user cannot be empty"):
            Target(name="web", host="10.0.0.1", user="")

    def test_node_location_cannot_smuggle_ssh_option(self):
        with pytest.raises(ValueError, match="Invalid hostname"):
            Target.from_node_config("web", {"location": "-oProxyCommand=id"})


class TestSlotValidation:
    @pytest.mark.parametrize("value", ["../../etc", "A" * 64, "a" * 63, "a" * 64 + "/x", ""])
    def test_identifier_rejects_non_hex(self, value):
        with pytest.raises(ValueError, match="Invalid identifier"):
            Identifier(value)

    def test_relative_base_dir_rejected(self):
        with pytest.raises(ValueError, match="absolute"):
            RemoteSlot(host="10.0.0.1", base_dir="etc/henix", identifier=ID)


class TestRemoteCommandQuoting:
    def test_build_command_tokens(self):
        target = Target(name="web-1", host="10.0.0.1")
        slot = resolve_slot(target.host, ID, base_dir="/srv/my configs")
        command = NixosRebuildBackend(AsyncMock()).build_command(target, slot)
        tokens = shlex.split(command)
        assert f'/srv/my configs/{ID}#nixosConfigurations."web-1".config.system.build.toplevel' in tokens
        assert f"/srv/my configs/{ID}#web-1" in tokens


class TestOTELConfigValidation:
    def test_empty_endpoint_allowed(self):
        assert OTELConfig(endpoint="").endpoint == ""

    def test_localhost_127_allowed(self):
        assert OTELConfig(endpoint="http://127.0.0.1:4317").endpoint

    def test_remote_http_rejected_without_insecure(self):
        with pytest.raises(ValueError):
            OTELConfig(endpoint="http://collector.internal:4317")
