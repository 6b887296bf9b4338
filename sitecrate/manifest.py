"""Required-file manifest and case-insensitive resolution of candidate files."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .constants import CORE_FILES, SITEVIEW_COUNT, SITEVIEW_EXTENSIONS
from .errors import InvalidInput, io_error


def siteview_files(count: int = SITEVIEW_COUNT) -> Tuple[str, ...]:
    names: List[str] = []
    for i in range(1, count + 1):
        for ext in SITEVIEW_EXTENSIONS:
            names.append(f"siteview{i}{ext}")
    return tuple(names)


@dataclass(frozen=True)
class Manifest:
    """Ordered, immutable set of canonical file names.

    Names are compared on their basename, ignoring case. Two names that differ
    only by case would make resolution ambiguous, so they are rejected here.
    """

    names: Tuple[str, ...]
    _index: Dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        index: Dict[str, str] = {}
        for name in self.names:
            if not name or os.path.basename(name) != name:
                raise InvalidInput(f"Manifest names must be bare file names: {name!r}")
            key = name.lower()
            if key in index:
                raise InvalidInput(f"Duplicate manifest name: {name!r} (already have {index[key]!r})")
            index[key] = name
        object.__setattr__(self, "_index", index)

    @classmethod
    def from_parts(cls, *groups: Iterable[str]) -> "Manifest":
        names: List[str] = []
        for group in groups:
            names.extend(group)
        return cls(tuple(names))

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)

    def __contains__(self, name) -> bool:
        return self.canonical(name) is not None

    def canonical(self, name: str) -> Optional[str]:
        """Canonical spelling of ``name`` (path component ignored), or None."""
        base = os.path.basename(str(name).replace("\\", "/"))
        return self._index.get(base.lower())


DEFAULT_MANIFEST = Manifest.from_parts(CORE_FILES, siteview_files())


@dataclass
class Resolution:
    matches: Dict[str, str]
    missing: frozenset

    @property
    def found(self) -> List[str]:
        return list(self.matches)


def resolve_sources(candidates: Sequence[str], manifest: Manifest = DEFAULT_MANIFEST) -> Resolution:
    """Match ``candidates`` against ``manifest`` by basename, ignoring case.

    The first candidate in ``candidates`` order wins when several match the same
    name. Files are never opened.
    """
    first_by_key: Dict[str, str] = {}
    for path in candidates:
        key = os.path.basename(str(path)).lower()
        first_by_key.setdefault(key, str(path))

    matches: Dict[str, str] = {}
    missing = set()
    for name in manifest:
        src = first_by_key.get(name.lower())
        if src is None:
            missing.add(name)
        else:
            matches[name] = src
    return Resolution(matches=matches, missing=frozenset(missing))


def list_candidates(directory) -> List[str]:
    """Regular files directly inside ``directory``, sorted by name."""
    try:
        with os.scandir(directory) as it:
            names = sorted(e.name for e in it if e.is_file())
    except OSError as exc:
        raise io_error(exc, directory, "list") from exc
    return [os.path.join(str(directory), n) for n in names]


def walk_candidates(directory) -> List[str]:
    """Regular files anywhere under ``directory``, in a stable walk order."""
    if not os.path.isdir(directory):
        raise io_error(FileNotFoundError(2, "No such directory"), directory, "walk")
    out: List[str] = []
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for fn in sorted(files):
            out.append(os.path.join(root, fn))
    return out


__all__ = [
    "DEFAULT_MANIFEST",
    "Manifest",
    "Resolution",
    "list_candidates",
    "resolve_sources",
    "siteview_files",
    "walk_candidates",
]
