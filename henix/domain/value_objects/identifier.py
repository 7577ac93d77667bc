from dataclasses import dataclass
import re


@dataclass(frozen=True)
class Identifier:
    """
    Value Object representing the content hash of a configuration tree.
    Always a base16 SHA-256 digest, so it is safe to use as a path component.
    """
    value: str

    def __post_init__(self):
        if not self._is_valid(self.value):
            raise ValueError(f"Invalid identifier format: {self.value!r}")

    @staticmethod
    def _is_valid(value: str) -> bool:
        return bool(re.fullmatch(r"[0-9a-f]{64}", value))

    @property
    def short(self) -> str:
        return self.value[:12]

    def __str__(self):
        return self.value
