"""
Target Value Object

Architectural Intent:
- Immutable value object representing one host of the fleet
- The node name doubles as the flake attribute built for that host
- Validates hostname format (DNS, IPv4, IPv6), port bounds, non-empty user
- Credentials beyond user/port are left to the SSH configuration
"""

import re
from dataclasses import dataclass, field
from typing import Any, Mapping

# RFC 1123 hostname: labels of alnum/hyphens, dot-separated
_HOSTNAME_RE = re.compile(
    r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$"
)

_IPV4_RE = re.compile(
    r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$"
)

# Simplified, accepts the common forms (::1, fe80::1, ...)
_IPV6_RE = re.compile(r"^[0-9a-fA-F:]+$")

_NODE_NAME_RE = re.compile(r"^[A-Za-z0-9_:.-]+$")


def _is_valid_hostname(host: str) -> bool:
    """Validate hostname as DNS name, IPv4, or IPv6."""
    if not host:
        return False

    m = _IPV4_RE.match(host)
    if m:
        return all(0 <= int(g) <= 255 for g in m.groups())

    if _IPV6_RE.match(host) and ":" in host:
        return True

    if _HOSTNAME_RE.match(host) and len(host) <= 253:
        return True

    return False


@dataclass(frozen=True)
class Target:
    """
    Value Object representing a remote host to deploy to.
    """
    name: str
    host: str
    user: str = "root"
    port: int = 22
    overrides: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self) -> None:
        if not _NODE_NAME_RE.match(self.name or ""):
            raise ValueError(f"Invalid node name: {self.name!r}")
        if not self.user:
            raise ValueError("Target user cannot be empty")
        if not (1 <= self.port <= 65535):
            raise ValueError(f"Port must be 1-65535, got {self.port}")
        if not _is_valid_hostname(self.host):
            raise ValueError(f"Invalid hostname: {self.host!r}")

    @property
    def address(self) -> str:
        """`user@host`, as understood by ssh and rsync."""
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.user}@{host}"

    def __str__(self) -> str:
        return f"{self.name} ({self.user}@{self.host}:{self.port})"

    @staticmethod
    def from_node_config(
        name: str, node_cfg: Mapping[str, Any], default_user: str = "root"
    ) -> "Target":
        """
        Builds a Target from one entry of the deploy configuration, e.g.
        ``{"location": "10.0.0.5", "sshPort": 2222}``.
        """
        if "location" not in node_cfg:
            raise ValueError(f"Node `{name}` has no `location`")
        port = node_cfg.get("sshPort", node_cfg.get("ssh_port"))
        known = {"location", "sshPort", "ssh_port", "user"}
        return Target(
            name=name,
            host=str(node_cfg["location"]),
            user=str(node_cfg.get("user") or default_user),
            port=int(port) if port is not None else 22,
            overrides={k: v for k, v in node_cfg.items() if k not in known},
        )
