"""Global test configuration.

Shared fixtures for building configuration trees and targets.
"""

import logging

import pytest

from henix.domain.value_objects.target import Target


@pytest.fixture
def config_tree(tmp_path):
    """A small flake-shaped configuration directory."""
    root = tmp_path / "config"
    (root / "hosts").mkdir(parents=True)
    (root / "flake.nix").write_text("{ outputs = { self }: { }; }\n")
    (root / "hosts" / "web.nix").write_text("{ networking.hostName = \"web\"; }\n")
    (root / "hosts" / "db.nix").write_text("{ networking.hostName = \"db\"; }\n")
    return root


@pytest.fixture
def target_a():
    return Target(name="alpha", host="10.0.0.1")


@pytest.fixture
def target_b():
    return Target(name="beta", host="10.0.0.2", port=2222)


@pytest.fixture(autouse=True)
def reset_henix_logger():
    """Drop handlers installed by configure_logging during a test."""
    yield
    logging.getLogger("henix").handlers.clear()
