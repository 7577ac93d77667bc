from dataclasses import dataclass


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of a remote command."""
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0

    @property
    def output(self) -> str:
        return "\n".join(part for part in (self.stdout, self.stderr) if part)
