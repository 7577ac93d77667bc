"""
Tree Hasher Adapter

Architectural Intent:
- In-process ContentHasherPort implementation (no Nix needed locally)
- SHA-256 over one length-framed record per entry, in path order, so that
  paths, entry kinds, the executable bit, symlink targets and file bytes
  all feed the digest and no two trees share an input stream
- Blocking file reads run in the default executor
"""

import asyncio
import hashlib

from henix.domain.entities.configuration_tree import ConfigurationTree, EntryKind
from henix.domain.errors import TreeUnreadable
from henix.domain.ports.content_hasher_port import ContentHasherPort
from henix.domain.value_objects.identifier import Identifier

_FORMAT_TAG = b"henix-tree-v1\0"
_CHUNK = 1 << 20


class Sha256TreeHasher(ContentHasherPort):
    async def hash_tree(self, tree: ConfigurationTree) -> Identifier:
        return await asyncio.get_event_loop().run_in_executor(None, self.hash_tree_sync, tree)

    def hash_tree_sync(self, tree: ConfigurationTree) -> Identifier:
        digest = hashlib.sha256(_FORMAT_TAG)
        for entry in tree.entries:
            path = entry.path.encode("utf-8", "surrogateescape")
            digest.update(entry.kind.value.encode() + b"\0")
            digest.update(str(len(path)).encode() + b"\0" + path)

            if entry.kind is EntryKind.SYMLINK:
                link = entry.link_target.encode("utf-8", "surrogateescape")
                digest.update(str(len(link)).encode() + b"\0" + link)
            elif entry.kind is EntryKind.FILE:
                digest.update(b"x" if entry.executable else b"-")
                digest.update(str(entry.size).encode() + b"\0")
                self._hash_file(digest, tree, entry)
        return Identifier(digest.hexdigest())

    @staticmethod
    def _hash_file(digest, tree: ConfigurationTree, entry) -> None:
        path = tree.absolute(entry)
        seen = 0
        try:
            with open(path, "rb") as f:
                while True:
                    chunk = f.read(_CHUNK)
                    if not chunk:
                        break
                    seen += len(chunk)
                    digest.update(chunk)
        except OSError as e:
            raise TreeUnreadable(str(tree.root), f"{entry.path}: {e}") from e
        if seen != entry.size:
            raise TreeUnreadable(str(tree.root), f"{entry.path} changed while hashing")
