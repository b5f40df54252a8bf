"""Most-recently-used file list with persistent storage."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Iterator

MAX_RECENT_FILES = 10


class RecentFileList:
    """Up to ten recently opened files, oldest first."""

    def __init__(self, files: Iterable[str] = ()) -> None:
        self._files: list[str] = []
        for filename in files:
            self.add_recent_file(filename)

    @property
    def files(self) -> list[str]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._files))

    def is_empty(self) -> bool:
        return not self._files

    def add_recent_file(self, filename: str) -> None:
        """Append a file, moving it to the end if present and dropping the oldest past ten."""
        if not filename:
            return
        self.remove_recent_file(filename)
        self._files.append(filename)
        if len(self._files) > MAX_RECENT_FILES:
            del self._files[0]

    def remove_recent_file(self, filename: str) -> None:
        if filename in self._files:
            self._files.remove(filename)

    def labels(self) -> list[str]:
        """Menu texts: a running number followed by the file's base name."""
        return [f"{number} {os.path.basename(name)}" for number, name in enumerate(self._files, start=1)]

    def save(self, path: str | os.PathLike[str]) -> None:
        entries = [{"Name": name} for name in self._files]
        Path(path).write_text(json.dumps({"RecentFiles": entries}, indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: str | os.PathLike[str]) -> RecentFileList:
        """Read a saved list; a missing file gives an empty list."""
        file = Path(path)
        if not file.exists():
            return cls()
        document = json.loads(file.read_text(encoding="utf-8"))
        return cls(str(entry.get("Name", "")) for entry in document.get("RecentFiles", []))