from __future__ import annotations

from pathlib import Path


class FileStoreError(ValueError):
    pass


class LocalFileStore:
    """Resolves stored document paths against a single root directory."""

    def __init__(self, root: str | Path):
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, file_path: str) -> Path:
        candidate = Path(file_path)
        if not candidate.is_absolute():
            candidate = self._root / candidate
        resolved = candidate.resolve()
        if resolved != self._root and self._root not in resolved.parents:
            raise FileStoreError(f"file_path escapes storage root: {file_path}")
        return resolved
