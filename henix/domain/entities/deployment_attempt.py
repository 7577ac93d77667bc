"""
Deployment Attempt Module

Architectural Intent:
- One DeploymentAttempt per target and run; it is the consistency boundary
  for that host's transfer -> build -> activate sequence
- Lifecycle managed through state transitions enforced by domain methods
- All state changes produce new instances, so an attempt can be handed
  between coroutines without locking
- Exactly one terminal state (SUCCEEDED or FAILED) per attempt

Domain Events:
- AttemptStartedEvent: transfer phase entered for a slot
- SlotTransferredEvent: slot materialised (or found already present)
- AttemptSucceededEvent: build and activation succeeded
- AttemptFailedEvent: attempt ended in FAILED, with the failure kind
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Any

from henix.domain.errors import RemoteExecutionError, TargetUnreachable, TransferError
from henix.domain.events.event_base import DomainEvent
from henix.domain.value_objects.build_outcome import BuildOutcome, BuildOutcomeKind
from henix.domain.value_objects.remote_slot import RemoteSlot
from henix.domain.value_objects.target import Target


class AttemptState(Enum):
    PENDING = auto()
    TRANSFERRING = auto()
    BUILDING = auto()
    SUCCEEDED = auto()
    FAILED = auto()


class FailureKind(Enum):
    TRANSFER_ERROR = "transfer_error"
    TARGET_UNREACHABLE = "target_unreachable"
    BUILD_FAILED = "build_failed"
    ACTIVATION_FAILED = "activation_failed"
    REMOTE_ERROR = "remote_error"
    INTERNAL = "internal"


@dataclass(frozen=True)
class AttemptFailure:
    kind: FailureKind
    message: str
    exit_code: Optional[int] = None
    output: str = ""

    @classmethod
    def from_outcome(cls, outcome: BuildOutcome) -> "AttemptFailure":
        if outcome.kind is BuildOutcomeKind.ACTIVATION_FAILED:
            return cls(
                FailureKind.ACTIVATION_FAILED,
                f"Activation failed (exit code {outcome.exit_code})",
                outcome.exit_code,
                outcome.output,
            )
        return cls(
            FailureKind.BUILD_FAILED,
            f"Build failed (exit code {outcome.exit_code})",
            outcome.exit_code,
            outcome.output,
        )

    @classmethod
    def from_exception(cls, exc: BaseException) -> "AttemptFailure":
        if isinstance(exc, TargetUnreachable):
            return cls(FailureKind.TARGET_UNREACHABLE, str(exc), exc.exit_code)
        if isinstance(exc, TransferError):
            return cls(FailureKind.TRANSFER_ERROR, str(exc), exc.exit_code, exc.output)
        if isinstance(exc, RemoteExecutionError):
            return cls(FailureKind.REMOTE_ERROR, str(exc))
        return cls(FailureKind.INTERNAL, f"{type(exc).__name__}: {exc}")


@dataclass(frozen=True)
class AttemptStartedEvent(DomainEvent):
    host: str = ""
    slot_path: str = ""


@dataclass(frozen=True)
class SlotTransferredEvent(DomainEvent):
    host: str = ""
    slot_path: str = ""
    skipped: bool = False


@dataclass(frozen=True)
class AttemptSucceededEvent(DomainEvent):
    host: str = ""
    slot_path: str = ""


@dataclass(frozen=True)
class AttemptFailedEvent(DomainEvent):
    host: str = ""
    kind: str = ""
    message: str = ""


class DeploymentAttempt:
    __slots__ = (
        "_target",
        "_slot",
        "_state",
        "_failure",
        "_transfer_skipped",
        "_duration",
        "_domain_events",
    )

    def __init__(
        self,
        target: Target,
        slot: Optional[RemoteSlot] = None,
        state: AttemptState = AttemptState.PENDING,
        failure: Optional[AttemptFailure] = None,
        transfer_skipped: bool = False,
        duration: float = 0.0,
        domain_events: tuple = (),
    ):
        self._target = target
        self._slot = slot
        self._state = state
        self._failure = failure
        self._transfer_skipped = transfer_skipped
        self._duration = duration
        self._domain_events = domain_events

    @property
    def target(self) -> Target:
        return self._target

    @property
    def slot(self) -> Optional[RemoteSlot]:
        return self._slot

    @property
    def state(self) -> AttemptState:
        return self._state

    @property
    def failure(self) -> Optional[AttemptFailure]:
        return self._failure

    @property
    def transfer_skipped(self) -> bool:
        return self._transfer_skipped

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def domain_events(self) -> tuple:
        return self._domain_events

    @property
    def is_terminal(self) -> bool:
        return self._state in (AttemptState.SUCCEEDED, AttemptState.FAILED)

    def _evolve(self, **changes: Any) -> "DeploymentAttempt":
        values = {
            "target": self._target,
            "slot": self._slot,
            "state": self._state,
            "failure": self._failure,
            "transfer_skipped": self._transfer_skipped,
            "duration": self._duration,
            "domain_events": self._domain_events,
        }
        values.update(changes)
        return DeploymentAttempt(**values)

    def start_transfer(self, slot: RemoteSlot) -> "DeploymentAttempt":
        if self._state != AttemptState.PENDING:
            raise ValueError("Attempt can only start transferring from PENDING state")
        return self._evolve(
            slot=slot,
            state=AttemptState.TRANSFERRING,
            domain_events=self._domain_events
            + (
                AttemptStartedEvent(
                    aggregate_id=self._target.name,
                    host=self._target.host,
                    slot_path=slot.path,
                ),
            ),
        )

    def complete_transfer(self, skipped: bool = False) -> "DeploymentAttempt":
        if self._state != AttemptState.TRANSFERRING:
            raise ValueError("Attempt must be TRANSFERRING to complete transfer")
        return self._evolve(
            state=AttemptState.BUILDING,
            transfer_skipped=skipped,
            domain_events=self._domain_events
            + (
                SlotTransferredEvent(
                    aggregate_id=self._target.name,
                    host=self._target.host,
                    slot_path=self._slot.path,
                    skipped=skipped,
                ),
            ),
        )

    def succeed(self) -> "DeploymentAttempt":
        if self._state != AttemptState.BUILDING:
            raise ValueError("Attempt must be BUILDING to succeed")
        return self._evolve(
            state=AttemptState.SUCCEEDED,
            domain_events=self._domain_events
            + (
                AttemptSucceededEvent(
                    aggregate_id=self._target.name,
                    host=self._target.host,
                    slot_path=self._slot.path,
                ),
            ),
        )

    def fail(self, failure: AttemptFailure) -> "DeploymentAttempt":
        if self._state not in (AttemptState.TRANSFERRING, AttemptState.BUILDING):
            raise ValueError("Attempt can only fail while TRANSFERRING or BUILDING")
        return self._evolve(
            state=AttemptState.FAILED,
            failure=failure,
            domain_events=self._domain_events
            + (
                AttemptFailedEvent(
                    aggregate_id=self._target.name,
                    host=self._target.host,
                    kind=failure.kind.value,
                    message=failure.message,
                ),
            ),
        )

    def with_duration(self, seconds: float) -> "DeploymentAttempt":
        return self._evolve(duration=seconds)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "node": self._target.name,
            "host": self._target.host,
            "state": self._state.name.lower(),
            "slot": self._slot.path if self._slot else None,
            "transfer_skipped": self._transfer_skipped,
            "duration_seconds": round(self._duration, 3),
        }
        if self._failure:
            data["failure"] = {
                "kind": self._failure.kind.value,
                "message": self._failure.message,
                "exit_code": self._failure.exit_code,
                "output": self._failure.output,
            }
        return data

    def __repr__(self) -> str:
        return (
            f"DeploymentAttempt(target={self._target.name}, state={self._state}, "
            f"slot={self._slot}, failure={self._failure})"
        )
