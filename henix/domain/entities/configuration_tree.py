"""
Configuration Tree

Architectural Intent:
- Snapshot of the local configuration directory taken once per run
- Entries are kept in canonical (path-sorted) order so every consumer
  walks the tree the same way on every machine
- Version-control metadata is not part of the configuration; the transport
  excludes the same directories so the slot holds exactly these entries
"""

from __future__ import annotations
import os
import stat
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from henix.domain.errors import TreeUnreadable

EXCLUDED_DIRS = (".git",)


class EntryKind(Enum):
    DIRECTORY = "dir"
    FILE = "file"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class TreeEntry:
    path: str
    kind: EntryKind
    size: int = 0
    executable: bool = False
    link_target: Optional[str] = None


@dataclass(frozen=True)
class ConfigurationTree:
    root: Path
    entries: tuple[TreeEntry, ...]

    @property
    def files(self) -> tuple[str, ...]:
        return tuple(e.path for e in self.entries if e.kind is not EntryKind.DIRECTORY)

    @property
    def total_size(self) -> int:
        return sum(e.size for e in self.entries)

    def absolute(self, entry: TreeEntry) -> Path:
        return self.root.joinpath(*entry.path.split("/"))

    @classmethod
    def scan(cls, root: Path | str) -> "ConfigurationTree":
        """Walk `root` and snapshot its entries.

        Raises:
            TreeUnreadable: root missing, not a directory, permission denied,
                or an entry vanished while scanning.
        """
        root = Path(root).absolute()
        if not root.exists():
            raise TreeUnreadable(str(root), "directory does not exist")
        if not root.is_dir():
            raise TreeUnreadable(str(root), "not a directory")

        entries: list[TreeEntry] = []

        def _onerror(err: OSError) -> None:
            raise TreeUnreadable(str(root), str(err)) from err

        try:
            for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror):
                dirnames[:] = [d for d in dirnames if d not in EXCLUDED_DIRS]
                base = Path(dirpath)
                # Symlinked directories are reported in dirnames but not followed
                for name in list(dirnames):
                    if (base / name).is_symlink():
                        dirnames.remove(name)
                        filenames.append(name)
                    else:
                        entries.append(cls._entry(root, base / name))
                for name in filenames:
                    entries.append(cls._entry(root, base / name))
        except OSError as e:
            raise TreeUnreadable(str(root), str(e)) from e

        entries.sort(key=lambda e: e.path)
        return cls(root=root, entries=tuple(entries))

    @staticmethod
    def _entry(root: Path, path: Path) -> TreeEntry:
        rel = path.relative_to(root).as_posix()
        st = path.lstat()
        if stat.S_ISLNK(st.st_mode):
            return TreeEntry(rel, EntryKind.SYMLINK, link_target=os.readlink(path))
        if stat.S_ISDIR(st.st_mode):
            return TreeEntry(rel, EntryKind.DIRECTORY)
        if not stat.S_ISREG(st.st_mode):
            raise TreeUnreadable(str(root), f"unsupported file type at `{rel}`")
        return TreeEntry(
            rel,
            EntryKind.FILE,
            size=st.st_size,
            executable=bool(st.st_mode & stat.S_IXUSR),
        )
