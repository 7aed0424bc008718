"""Merges traversal output into a deduplicated, deterministically ordered set."""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from change_detection.path_matchers.types import PathArg, normalize_path


@dataclass(frozen=True)
class ResultSet:
    """
    Normalized path strings (forward slashes), unique and sorted by code point.
    """

    paths: tuple[str, ...] = ()

    def __iter__(self) -> Iterator[str]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)

    def __contains__(self, path: object) -> bool:
        if isinstance(path, str):
            return normalize_path(path) in self.paths
        return False


def _identity(path: str) -> str:
    return normalize_path(os.path.abspath(path))


def collect(*sequences: Iterable[PathArg]) -> ResultSet:
    """
    Merge any number of path sequences. The same file reached from two roots,
    from a root nested inside another, or through a relative and an absolute
    spelling of one root, appears once.

    Identity is the absolute path against the current directory. When one file
    has several spellings, the shortest (then the lowest by code point) is kept,
    so the result doesn't depend on root order.
    """
    by_identity: dict[str, str] = {}
    for sequence in sequences:
        for path in sequence:
            text = normalize_path(path)
            key = _identity(text)
            kept = by_identity.get(key)
            if kept is None or (len(text), text) < (len(kept), kept):
                by_identity[key] = text
    return ResultSet(tuple(sorted(by_identity.values())))
