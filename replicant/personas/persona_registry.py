"""A name-indexed collection of persona definitions found on disk."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from replicant.personas.definition import ReplicantDef
from replicant.personas.loader import LoadError, load_from_file


def default_dirs() -> list[str]:
    """Return the standard search directories, highest priority first."""
    dirs = ["./replicants/"]
    try:
        home = Path.home()
    except RuntimeError:
        return dirs
    dirs.append(str(home / ".replicant" / "replicants"))
    return dirs


def _markdown_files(directory: str) -> list[str]:
    try:
        names = [entry.name for entry in os.scandir(directory)]
    except (FileNotFoundError, NotADirectoryError):
        return []
    return [
        os.path.join(directory, name)
        for name in sorted(names)
        if fnmatch.fnmatchcase(name, "*.md")
    ]


class Registry:
    """Persona definitions indexed by name.

    Directories are scanned in order; when a name appears more than once
    the definition from the earliest directory wins.
    """

    def __init__(self, *dirs: str | os.PathLike[str]) -> None:
        search = [os.fspath(d) for d in dirs] or default_dirs()
        self._defs: dict[str, ReplicantDef] = {}
        for directory in search:
            for path in _markdown_files(directory):
                try:
                    definition = load_from_file(path)
                except LoadError as exc:
                    raise LoadError(f"load {path}: {exc}") from exc
                self._defs.setdefault(definition.name, definition)

    def get(self, name: str) -> ReplicantDef | None:
        """Return the definition with the given name, or None."""
        return self._defs.get(name)

    def list(self) -> list[ReplicantDef]:
        """Return all definitions sorted by name."""
        return sorted(self._defs.values(), key=lambda d: d.name)

    def __len__(self) -> int:
        return len(self._defs)

    def __contains__(self, name: object) -> bool:
        return name in self._defs