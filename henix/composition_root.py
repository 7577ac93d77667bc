"""
Composition Root

Architectural Intent:
- Dependency injection composition root for henix
- Single place where all adapters and use cases are wired together
- No adapter instantiation should occur outside this module

Design Decisions:
- Uses a simple dataclass container instead of a DI framework
- Per-run CLI flags (--boot, --show-trace) are passed in as overrides of
  the loaded configuration
"""

from dataclasses import dataclass
from typing import Optional

from henix.application.services.build_invoker import BuildInvoker
from henix.application.services.identifier_deriver import IdentifierDeriver
from henix.application.services.remote_store_layout import RemoteStoreLayout
from henix.application.services.transfer_coordinator import TransferCoordinator
from henix.application.use_cases.deploy_fleet import DeployFleet
from henix.application.use_cases.resolve_targets import ResolveTargets
from henix.domain.ports.content_hasher_port import ContentHasherPort
from henix.infrastructure.adapters.fabric_adapter import FabricAdapter
from henix.infrastructure.adapters.nix_adapter import NixAdapter, NixHashAdapter
from henix.infrastructure.adapters.nixos_rebuild_backend import NixosRebuildBackend
from henix.infrastructure.adapters.rsync_transport import RsyncTransport
from henix.infrastructure.adapters.tree_hasher import Sha256TreeHasher
from henix.infrastructure.config import HenixConfig
from henix.infrastructure.event_bus import EventBus
from henix.infrastructure.telemetry.otel_exporter import OTELExporter, create_exporter

HASHERS = {
    "sha256": Sha256TreeHasher,
    "nix-hash": NixHashAdapter,
}


@dataclass
class HenixContainer:
    """DI container holding all wired dependencies."""

    config: HenixConfig
    hasher: ContentHasherPort
    nix_adapter: NixAdapter
    fabric_adapter: FabricAdapter
    rsync_transport: RsyncTransport
    build_backend: NixosRebuildBackend
    event_bus: EventBus
    telemetry: OTELExporter
    deriver: IdentifierDeriver
    deploy_fleet: DeployFleet
    resolve_targets: ResolveTargets


def create_container(
    config: Optional[HenixConfig] = None,
    mode: Optional[str] = None,
    show_trace: Optional[bool] = None,
) -> HenixContainer:
    """Create and wire all dependencies."""
    config = config or HenixConfig()

    if config.hasher not in HASHERS:
        raise ValueError(
            f"Unknown hasher {config.hasher!r}, expected one of {sorted(HASHERS)}"
        )
    hasher = HASHERS[config.hasher]()

    nix_adapter = NixAdapter()
    fabric_adapter = FabricAdapter(connect_timeout=config.ssh.connect_timeout)
    rsync_transport = RsyncTransport(
        rsync_path=config.transport.rsync_path, timeout=config.transport.timeout
    )
    build_backend = NixosRebuildBackend(
        fabric_adapter,
        mode=mode or config.deploy.mode,
        show_trace=config.deploy.show_trace if show_trace is None else show_trace,
    )
    event_bus = EventBus()
    telemetry = create_exporter(
        endpoint=config.telemetry.endpoint, insecure=config.telemetry.insecure
    )

    deriver = IdentifierDeriver(hasher)
    deploy_fleet = DeployFleet(
        deriver=deriver,
        layout=RemoteStoreLayout(fabric_adapter, base_dir=config.deploy.base_dir),
        transfer=TransferCoordinator(rsync_transport),
        builder=BuildInvoker(build_backend),
        event_bus=event_bus,
        telemetry=telemetry,
    )
    resolve_targets = ResolveTargets(nix_adapter, default_user=config.ssh.user)

    return HenixContainer(
        config=config,
        hasher=hasher,
        nix_adapter=nix_adapter,
        fabric_adapter=fabric_adapter,
        rsync_transport=rsync_transport,
        build_backend=build_backend,
        event_bus=event_bus,
        telemetry=telemetry,
        deriver=deriver,
        deploy_fleet=deploy_fleet,
        resolve_targets=resolve_targets,
    )
