from dataclasses import dataclass
import posixpath

from henix.domain.value_objects.identifier import Identifier

DEFAULT_BASE_DIR = "/etc/henix"
MARKER_SUFFIX = ".done"


@dataclass(frozen=True)
class RemoteSlot:
    """
    Value Object for the remote directory holding one configuration version.
    The path is `<base_dir>/<identifier>`; slots are created once and never
    overwritten with different content.

    `<base_dir>/<identifier>.done` is written next to the slot once a
    transfer into it has finished. It lives outside the slot so it is never
    part of the hashed content.
    """
    host: str
    base_dir: str
    identifier: Identifier

    def __post_init__(self):
        if not posixpath.isabs(self.base_dir):
            raise ValueError(f"Slot base directory must be absolute: {self.base_dir!r}")

    @property
    def path(self) -> str:
        return self.base_dir.rstrip("/") + "/" + self.identifier.value

    @property
    def marker_path(self) -> str:
        return self.path + MARKER_SUFFIX

    def __str__(self):
        return f"{self.host}:{self.path}"
