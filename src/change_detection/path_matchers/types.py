"""Base matcher type and the path normalization shared by all matchers."""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import PurePath

PathArg = str | os.PathLike[str]


def normalize_path(path: PathArg) -> str:
    """
    Normalized text of a path as used for matching and output: `.` and `..`
    segments collapsed, forward slashes on every platform.
    """
    return PurePath(os.path.normpath(os.fspath(path))).as_posix()


def path_forms(
    path: PathArg, root: PathArg | None = None, *, include_full: bool = False
) -> tuple[str, ...]:
    """
    The textual forms a matcher tests: the path relative to `root` when `root`
    contains it, otherwise the full normalized path.

    With `include_full`, the full path is tested after the relative one. Only
    literal and anchored matchers ask for it; an unanchored pattern like `*.tmp`
    tested against the full path would also see the root's own name and the
    directories above it.
    """
    full = normalize_path(path)
    if root is None:
        return (full,)
    try:
        relative = PurePath(full).relative_to(normalize_path(root)).as_posix()
    except ValueError:
        return (full,)
    if relative in (".", full):
        return (full,)
    if include_full:
        return (relative, full)
    return (relative,)


class PathMatcher(ABC):
    """
    A pure predicate over filesystem paths.

    `root` is the base directory the path was discovered under. Matchers test
    the path relative to `root`; literal and anchored matchers also test the
    full path, and match if either form does.

    Matchers compose with `&` (`All`), `|` (`Any`) and `~` (`Not`).
    """

    @abstractmethod
    def matches(self, path: PathArg, root: PathArg | None = None) -> bool: ...

    def __and__(self, other: PathMatcher) -> PathMatcher:
        from change_detection.path_matchers.matchers import All

        return All(self, other)

    def __or__(self, other: PathMatcher) -> PathMatcher:
        from change_detection.path_matchers.matchers import Any

        return Any(self, other)

    def __invert__(self) -> PathMatcher:
        from change_detection.path_matchers.matchers import Not

        return Not(self)
