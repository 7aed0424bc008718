"""
Leaf matchers (`Exact`, `Glob`, `Predicate`) and the boolean combinators
(`All`, `Any`, `Not`).
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

from change_detection.errors import PatternError
from change_detection.path_matchers.types import PathArg, PathMatcher, normalize_path, path_forms


def _comparable(path: PathArg) -> str:
    return normalize_path(os.path.normcase(os.fspath(path)))


@dataclass(frozen=True)
class Exact(PathMatcher):
    """
    Matches one literal path. Comparison uses the host's case sensitivity.
    An absolute target also matches the absolute form of the candidate.
    """

    path: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", os.fspath(self.path))

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        target = _comparable(self.path)
        forms = path_forms(path, root, include_full=True)
        if any(_comparable(form) == target for form in forms):
            return True
        if os.path.isabs(self.path):
            return _comparable(os.path.abspath(path)) == target
        return False


def compile_glob(pattern: str) -> pathspec.PathSpec:
    """
    Compile a single glob pattern, rejecting patterns that would silently match
    nothing or that only make sense inside an ignore file.
    """
    stripped = pattern.strip()
    if not stripped:
        raise PatternError("Empty glob pattern")
    if stripped.startswith("#"):
        raise PatternError(f"Glob pattern looks like a comment: {pattern!r}")
    if stripped.startswith("!"):
        raise PatternError(f"Negated glob patterns are not supported, use Not(): {pattern!r}")
    if stripped == "/":
        raise PatternError("Glob pattern '/' matches nothing")
    try:
        return pathspec.GitIgnoreSpec.from_lines([pattern])
    except ValueError as e:
        raise PatternError(f"Invalid glob pattern {pattern!r}: {e}") from e


@dataclass(frozen=True)
class Glob(PathMatcher):
    """
    Matches paths by a gitignore-style wildcard pattern.

    - `*` matches within one path segment, `?` one character, `[...]` a class.
    - `**` as a whole segment matches any number of segments.
    - A pattern without a slash matches at any depth (`*.tmp`).
    - A pattern with a slash is anchored (`static/**/*.css`).
    - A trailing `/` matches everything under a directory of that name.

    Patterns are tested against the path relative to the traversal root, so the
    root's name and the directories above it never affect the files under it.
    Anchored patterns are also tested against the path as discovered
    (`another_path/**/*.tmp`).

    The pattern is compiled on construction, so invalid patterns raise
    `PatternError` immediately.
    """

    pattern: str
    _spec: pathspec.PathSpec = field(init=False, repr=False, compare=False)
    _anchored: bool = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_spec", compile_glob(self.pattern))
        # A trailing slash alone doesn't anchor a gitignore pattern.
        object.__setattr__(self, "_anchored", "/" in self.pattern.strip().rstrip("/"))

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        forms = path_forms(path, root, include_full=self._anchored)
        return any(self._spec.match_file(form) for form in forms)


@dataclass(frozen=True)
class Predicate(PathMatcher):
    """Wraps a plain `func(path) -> bool`. The function should be pure."""

    func: Callable[[Path], bool]

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        return bool(self.func(Path(path)))


@dataclass(frozen=True, init=False)
class All(PathMatcher):
    """Logical AND. Stops at the first operand that doesn't match."""

    matchers: tuple[PathMatcher, ...]

    def __init__(self, *matchers: PathMatcher) -> None:
        if not matchers:
            raise TypeError("All() needs at least one matcher")
        object.__setattr__(self, "matchers", tuple(matchers))

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        return all(m.matches(path, root) for m in self.matchers)


@dataclass(frozen=True, init=False)
class Any(PathMatcher):
    """Logical OR. Stops at the first operand that matches."""

    matchers: tuple[PathMatcher, ...]

    def __init__(self, *matchers: PathMatcher) -> None:
        if not matchers:
            raise TypeError("Any() needs at least one matcher")
        object.__setattr__(self, "matchers", tuple(matchers))

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        return any(m.matches(path, root) for m in self.matchers)


@dataclass(frozen=True)
class Not(PathMatcher):
    """Logical negation."""

    matcher: PathMatcher

    def matches(self, path: PathArg, root: PathArg | None = None) -> bool:
        return not self.matcher.matches(path, root)


MatcherLike = PathMatcher | str | Callable[[Path], bool]


def as_matcher(value: MatcherLike) -> PathMatcher:
    """
    Coerce a matcher-like value: a `PathMatcher` is returned unchanged, a string
    becomes a `Glob`, and a callable becomes a `Predicate`.
    """
    if isinstance(value, PathMatcher):
        return value
    if isinstance(value, str):
        return Glob(value)
    if callable(value):
        return Predicate(value)
    raise TypeError(f"Expected a PathMatcher, glob string or callable, got {type(value).__name__}")
