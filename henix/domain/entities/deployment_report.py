"""
Deployment Report

Architectural Intent:
- Read-only aggregate of every attempt of one run
- Only ever built once, after all attempts reached a terminal state
- Owns the mapping from fleet outcome to process exit status
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any

from henix.domain.entities.deployment_attempt import AttemptState, DeploymentAttempt
from henix.domain.value_objects.identifier import Identifier

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2
EXIT_DEPLOY_FAILED = 3


class ReportOutcome(Enum):
    SUCCEEDED = "succeeded"
    PARTIAL = "partial"
    FAILED = "failed"
    EMPTY = "empty"


@dataclass(frozen=True)
class DeploymentReport:
    identifier: Identifier
    attempts: tuple[DeploymentAttempt, ...]

    def __post_init__(self) -> None:
        for attempt in self.attempts:
            if not attempt.is_terminal:
                raise ValueError(
                    f"Attempt for `{attempt.target.name}` is not finished ({attempt.state})"
                )

    @property
    def succeeded(self) -> tuple[DeploymentAttempt, ...]:
        return tuple(a for a in self.attempts if a.state is AttemptState.SUCCEEDED)

    @property
    def failed(self) -> tuple[DeploymentAttempt, ...]:
        return tuple(a for a in self.attempts if a.state is AttemptState.FAILED)

    @property
    def is_success(self) -> bool:
        return not self.failed

    @property
    def outcome(self) -> ReportOutcome:
        if not self.attempts:
            return ReportOutcome.EMPTY
        if not self.failed:
            return ReportOutcome.SUCCEEDED
        if self.succeeded:
            return ReportOutcome.PARTIAL
        return ReportOutcome.FAILED

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.is_success else EXIT_DEPLOY_FAILED

    def attempt_for(self, name: str) -> DeploymentAttempt:
        for attempt in self.attempts:
            if attempt.target.name == name:
                return attempt
        raise KeyError(name)

    @property
    def domain_events(self) -> list:
        return [event for attempt in self.attempts for event in attempt.domain_events]

    def summary_lines(self) -> list[str]:
        lines = []
        for attempt in self.succeeded:
            note = " (slot reused)" if attempt.transfer_skipped else ""
            lines.append(f"[+] {attempt.target.name}: activated {attempt.slot.path}{note}")
        for attempt in self.failed:
            failure = attempt.failure
            lines.append(f"[-] {attempt.target.name}: {failure.kind.value}: {failure.message}")
            if attempt.slot is not None:
                lines.append(f"    inspect: {attempt.target.address}:{attempt.slot.path}")
            if failure.output:
                lines.extend(f"    | {line}" for line in failure.output.splitlines())
        return lines

    def to_dict(self) -> dict[str, Any]:
        return {
            "identifier": self.identifier.value,
            "outcome": self.outcome.value,
            "succeeded": [a.target.name for a in self.succeeded],
            "failed": [a.target.name for a in self.failed],
            "attempts": [a.to_dict() for a in self.attempts],
        }
