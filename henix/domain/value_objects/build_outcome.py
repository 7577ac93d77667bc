from dataclasses import dataclass
from enum import Enum


class BuildOutcomeKind(Enum):
    ACTIVATED = "activated"
    BUILD_FAILED = "build_failed"
    ACTIVATION_FAILED = "activation_failed"


@dataclass(frozen=True)
class BuildOutcome:
    """
    Result of one remote build-and-activate command.

    BUILD_FAILED leaves the previous generation active. ACTIVATION_FAILED
    means the configuration built but switching to it did not complete.
    """
    kind: BuildOutcomeKind
    exit_code: int = 0
    output: str = ""

    @property
    def activated(self) -> bool:
        return self.kind is BuildOutcomeKind.ACTIVATED

    @classmethod
    def activated_ok(cls, output: str = "") -> "BuildOutcome":
        return cls(BuildOutcomeKind.ACTIVATED, 0, output)

    @classmethod
    def build_failed(cls, exit_code: int, output: str = "") -> "BuildOutcome":
        return cls(BuildOutcomeKind.BUILD_FAILED, exit_code, output)

    @classmethod
    def activation_failed(cls, exit_code: int, output: str = "") -> "BuildOutcome":
        return cls(BuildOutcomeKind.ACTIVATION_FAILED, exit_code, output)
