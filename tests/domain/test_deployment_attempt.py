"""Tests for the DeploymentAttempt aggregate."""

import pytest
from henix.domain.entities.deployment_attempt import (
    AttemptFailedEvent,
    AttemptFailure,
    AttemptStartedEvent,
    AttemptState,
    AttemptSucceededEvent,
    DeploymentAttempt,
    FailureKind,
    SlotTransferredEvent,
)
from henix.domain.errors import RemoteExecutionError, TargetUnreachable, TransferError
from henix.domain.value_objects.build_outcome import BuildOutcome
from henix.domain.value_objects.identifier import Identifier
from henix.domain.value_objects.remote_slot import RemoteSlot


@pytest.fixture
def slot(target_a):
    return RemoteSlot(host=target_a.host, base_dir="/etc/henix", identifier=Identifier("c" * 64))


class TestLifecycle:
    def test_initial_state(self, target_a):
        attempt = DeploymentAttempt(target_a)
        assert attempt.state == AttemptState.PENDING
        assert attempt.slot is None
        assert not attempt.is_terminal

    def test_success_path(self, target_a, slot):
        attempt = (
            DeploymentAttempt(target_a)
            .start_transfer(slot)
            .complete_transfer()
            .succeed()
        )
        assert attempt.state == AttemptState.SUCCEEDED
        assert attempt.is_terminal
        assert attempt.failure is None
        assert [type(e) for e in attempt.domain_events] == [
            AttemptStartedEvent,
            SlotTransferredEvent,
            AttemptSucceededEvent,
        ]

    def test_transitions_return_new_instances(self, target_a, slot):
        pending = DeploymentAttempt(target_a)
        transferring = pending.start_transfer(slot)
        assert pending.state == AttemptState.PENDING
        assert transferring.state == AttemptState.TRANSFERRING
        assert transferring is not pending

    def test_skipped_transfer_recorded(self, target_a, slot):
        attempt = DeploymentAttempt(target_a).start_transfer(slot).complete_transfer(skipped=True)
        assert attempt.transfer_skipped
        assert attempt.domain_events[-1].skipped is True

    def test_fail_during_transfer(self, target_a, slot):
        failure = AttemptFailure(FailureKind.TRANSFER_ERROR, "disk full")
        attempt = DeploymentAttempt(target_a).start_transfer(slot).fail(failure)
        assert attempt.state == AttemptState.FAILED
        assert attempt.failure == failure
        assert isinstance(attempt.domain_events[-1], AttemptFailedEvent)
        assert attempt.domain_events[-1].kind == "transfer_error"

    def test_fail_during_build(self, target_a, slot):
        failure = AttemptFailure.from_outcome(BuildOutcome.build_failed(1, "boom"))
        attempt = (
            DeploymentAttempt(target_a).start_transfer(slot).complete_transfer().fail(failure)
        )
        assert attempt.state == AttemptState.FAILED
        assert attempt.failure.kind == FailureKind.BUILD_FAILED


class TestInvalidTransitions:
    def test_cannot_complete_transfer_from_pending(self, target_a):
        with pytest.raises(ValueError, match="TRANSFERRING"):
            DeploymentAttempt(target_a).complete_transfer()

    def test_cannot_succeed_while_transferring(self, target_a, slot):
        with pytest.raises(ValueError, match="BUILDING"):
            DeploymentAttempt(target_a).start_transfer(slot).succeed()

    def test_cannot_fail_from_pending(self, target_a):
        with pytest.raises(ValueError):
            DeploymentAttempt(target_a).fail(AttemptFailure(FailureKind.INTERNAL, "x"))

    def test_single_terminal_state(self, target_a, slot):
        done = DeploymentAttempt(target_a).start_transfer(slot).complete_transfer().succeed()
        with pytest.raises(ValueError):
            done.fail(AttemptFailure(FailureKind.INTERNAL, "late"))
        with pytest.raises(ValueError):
            done.start_transfer(slot)


class TestAttemptFailure:
    def test_from_activation_outcome(self):
        failure = AttemptFailure.from_outcome(BuildOutcome.activation_failed(97, "bootloader"))
        assert failure.kind == FailureKind.ACTIVATION_FAILED
        assert failure.exit_code == 97
        assert failure.output == "bootloader"

    def test_from_transfer_error(self):
        failure = AttemptFailure.from_exception(
            TransferError("h", "rsync exited with 23", exit_code=23, output="denied")
        )
        assert failure.kind == FailureKind.TRANSFER_ERROR
        assert failure.exit_code == 23
        assert failure.output == "denied"

    def test_from_unreachable(self):
        failure = AttemptFailure.from_exception(TargetUnreachable("h", "timed out"))
        assert failure.kind == FailureKind.TARGET_UNREACHABLE
        assert "unreachable" in failure.message

    def test_from_remote_execution_error(self):
        failure = AttemptFailure.from_exception(
            RemoteExecutionError("h", "nix build", "Command did not complete within 60 seconds")
        )
        assert failure.kind == FailureKind.REMOTE_ERROR
        assert failure.kind.value == "remote_error"
        assert "`h`" in failure.message

    def test_from_unexpected_exception(self):
        failure = AttemptFailure.from_exception(RuntimeError("bug"))
        assert failure.kind == FailureKind.INTERNAL
        assert failure.message == "RuntimeError: bug"


class TestSerialisation:
    def test_to_dict(self, target_a, slot):
        attempt = (
            DeploymentAttempt(target_a)
            .start_transfer(slot)
            .fail(AttemptFailure(FailureKind.TRANSFER_ERROR, "nope", 12, "out"))
            .with_duration(1.23456)
        )
        data = attempt.to_dict()
        assert data["node"] == "alpha"
        assert data["state"] == "failed"
        assert data["slot"] == slot.path
        assert data["duration_seconds"] == 1.235
        assert data["failure"] == {
            "kind": "transfer_error",
            "message": "nope",
            "exit_code": 12,
            "output": "out",
        }
