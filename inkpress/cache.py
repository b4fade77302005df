from __future__ import annotations

import hashlib
from pathlib import Path


def hash_bytes(data: bytes) -> str:
    return hashlib.md5(data).hexdigest()


def hash_file(path: Path) -> str:
    return hash_bytes(path.read_bytes())


class DigestCache:
    """MD5 digests of files keyed by absolute path.

    Entries are never evicted, so a file edited while the process is alive
    keeps its first digest unless ``check_mtime`` is set. Separate processes
    start empty.
    """

    def __init__(self, check_mtime: bool = False) -> None:
        self.check_mtime = check_mtime
        self._entries: dict[str, tuple[float | None, str]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path: object) -> bool:
        return str(Path(str(path)).absolute()) in self._entries

    def digest(self, path: Path) -> str:
        key = str(path.absolute())
        mtime = path.stat().st_mtime if self.check_mtime else None
        cached = self._entries.get(key)
        if cached is not None and (not self.check_mtime or cached[0] == mtime):
            return cached[1]
        value = hash_file(path)
        self._entries[key] = (mtime, value)
        return value
