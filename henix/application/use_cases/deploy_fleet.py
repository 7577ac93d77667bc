"""
Deploy Fleet Use Case

Architectural Intent:
- Derives the configuration identifier once, before any host is contacted
- Runs one independent DeploymentAttempt per target:
  resolve slot -> (complete?) -> transfer -> mark complete -> build and activate
- A failing target never blocks, cancels or rolls back another one
- Per-target errors are captured into that target's attempt; only
  TreeUnreadable escapes, and only before fan-out

Concurrency:
- Attempts run concurrently under asyncio.gather, optionally bounded by a
  semaphore; each returns its own immutable attempt, so the join needs no
  locking
"""

from __future__ import annotations
import asyncio
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, TYPE_CHECKING

from henix.application.services.build_invoker import BuildInvoker
from henix.application.services.identifier_deriver import IdentifierDeriver
from henix.application.services.remote_store_layout import RemoteStoreLayout
from henix.application.services.transfer_coordinator import TransferCoordinator
from henix.domain.entities.configuration_tree import ConfigurationTree
from henix.domain.entities.deployment_attempt import AttemptFailure, DeploymentAttempt
from henix.domain.entities.deployment_report import DeploymentReport
from henix.domain.ports.event_bus_port import EventBusPort
from henix.domain.value_objects.identifier import Identifier
from henix.domain.value_objects.target import Target

if TYPE_CHECKING:
    from henix.infrastructure.telemetry.otel_exporter import OTELExporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeployOptions:
    check_existing: bool = True
    force_transfer: bool = False
    parallel: bool = True
    max_parallel: int = 0

    def __post_init__(self) -> None:
        if self.max_parallel < 0:
            raise ValueError(f"max_parallel must be >= 0, got {self.max_parallel}")


class DeployFleet:
    def __init__(
        self,
        deriver: IdentifierDeriver,
        layout: RemoteStoreLayout,
        transfer: TransferCoordinator,
        builder: BuildInvoker,
        event_bus: Optional[EventBusPort] = None,
        telemetry: Optional["OTELExporter"] = None,
    ):
        self.deriver = deriver
        self.layout = layout
        self.transfer = transfer
        self.builder = builder
        self.event_bus = event_bus
        self.telemetry = telemetry

    async def execute(
        self,
        config_dir: Path,
        targets: Sequence[Target],
        options: Optional[DeployOptions] = None,
    ) -> DeploymentReport:
        options = options or DeployOptions()
        names = [t.name for t in targets]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate targets: {', '.join(duplicates)}")

        tree, identifier = await self.deriver.derive_path(Path(config_dir))
        logger.info("Deploying %s to %d node(s)", identifier.short, len(targets))

        if options.parallel:
            limit = asyncio.Semaphore(options.max_parallel) if options.max_parallel else None

            async def bounded(target: Target) -> DeploymentAttempt:
                if limit is None:
                    return await self._run_attempt(tree, identifier, target, options)
                async with limit:
                    return await self._run_attempt(tree, identifier, target, options)

            attempts = await asyncio.gather(*(bounded(t) for t in targets))
        else:
            attempts = []
            for target in targets:
                attempts.append(await self._run_attempt(tree, identifier, target, options))

        report = DeploymentReport(identifier=identifier, attempts=tuple(attempts))

        if self.event_bus is not None:
            await self.event_bus.publish(report.domain_events)

        if report.is_success:
            logger.info("Deployment successful to %d node(s).", len(report.succeeded))
        else:
            logger.error(
                "Deployment failed on %s",
                ", ".join(a.target.name for a in report.failed),
            )
        return report

    async def _run_attempt(
        self,
        tree: ConfigurationTree,
        identifier: Identifier,
        target: Target,
        options: DeployOptions,
    ) -> DeploymentAttempt:
        started = time.monotonic()
        span = None
        if self.telemetry is not None:
            span = self.telemetry.start_span(
                "henix.attempt", {"node": target.name, "identifier": identifier.value}
            )

        attempt = DeploymentAttempt(target)
        try:
            slot = self.layout.resolve(target, identifier)
            attempt = attempt.start_transfer(slot)
            try:
                skipped = False
                if options.check_existing and not options.force_transfer:
                    skipped = await self.layout.exists(target, slot)
                if skipped:
                    logger.info("%s already present on %s, skipping copy", slot.path, target.name)
                else:
                    await self.transfer.transfer(tree, target, slot)
                    await self.layout.mark_complete(target, slot)
                attempt = attempt.complete_transfer(skipped=skipped)

                outcome = await self.builder.build_and_activate(target, slot)
                if outcome.activated:
                    attempt = attempt.succeed()
                else:
                    attempt = attempt.fail(AttemptFailure.from_outcome(outcome))
            except Exception as e:
                logger.error("Deployment to %s failed: %s", target.name, e)
                attempt = attempt.fail(AttemptFailure.from_exception(e))

            attempt = attempt.with_duration(time.monotonic() - started)
            if self.telemetry is not None:
                self.telemetry.record_attempt(
                    target.name, attempt.state.name.lower(), attempt.duration
                )
        finally:
            if self.telemetry is not None:
                self.telemetry.end_span(
                    span, attempt.failure.message if attempt.failure else None
                )
        return attempt
