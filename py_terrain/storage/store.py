"""
Byte stores backing saved terrains.

A store maps artifact names to whole byte blobs. Writes replace the
whole artifact; there is no in-place patching.
"""

import fnmatch
from pathlib import Path
from typing import Dict, List, Protocol, Union

import structlog

from ..core.errors import PersistenceIOError

logger = structlog.get_logger()


class BackingStore(Protocol):
    """Name-keyed byte store used by the codec and slot registry."""

    def exists(self, name: str) -> bool:
        ...

    def read_all(self, name: str) -> bytes:
        ...

    def write_all(self, name: str, data: bytes) -> None:
        ...

    def list_names(self, pattern: str = "*") -> List[str]:
        ...


class FileSystemStore:
    """Store artifacts as files in a single directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def _path(self, name: str) -> Path:
        if not name or Path(name).name != name:
            raise ValueError(f"Invalid artifact name: {name!r}")
        return self.root / name

    def exists(self, name: str) -> bool:
        return self._path(name).is_file()

    def read_all(self, name: str) -> bytes:
        path = self._path(name)
        try:
            return path.read_bytes()
        except OSError as e:
            logger.error("Failed to read artifact", path=str(path), error=str(e))
            raise PersistenceIOError(f"Cannot read {path}: {e}") from e

    def write_all(self, name: str, data: bytes) -> None:
        path = self._path(name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error("Failed to write artifact", path=str(path), error=str(e))
            raise PersistenceIOError(f"Cannot write {path}: {e}") from e

    def list_names(self, pattern: str = "*") -> List[str]:
        if not self.root.is_dir():
            return []
        try:
            return sorted(p.name for p in self.root.glob(pattern) if p.is_file())
        except OSError as e:
            raise PersistenceIOError(f"Cannot list {self.root}: {e}") from e


class MemoryStore:
    """In-memory store for tests and throwaway sessions."""

    def __init__(self, artifacts: Dict[str, bytes] = None):
        self.artifacts: Dict[str, bytes] = dict(artifacts or {})

    def exists(self, name: str) -> bool:
        return name in self.artifacts

    def read_all(self, name: str) -> bytes:
        try:
            return self.artifacts[name]
        except KeyError:
            raise PersistenceIOError(f"No artifact named {name!r}") from None

    def write_all(self, name: str, data: bytes) -> None:
        self.artifacts[name] = bytes(data)

    def list_names(self, pattern: str = "*") -> List[str]:
        return sorted(n for n in self.artifacts if fnmatch.fnmatchcase(n, pattern))
