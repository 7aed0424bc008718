"""
Fluent builder that accumulates roots and filters, then emits directives.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from change_detection.collector import ResultSet, collect
from change_detection.emitter import DEFAULT_PREFIX, emit
from change_detection.errors import BuilderStateError
from change_detection.path_matchers import All, Any, MatcherLike, PathMatcher, as_matcher
from change_detection.path_matchers.types import PathArg
from change_detection.traversal import traverse


@dataclass(frozen=True)
class Root:
    """A declared starting path, with optional filters that apply only to it."""

    path: Path
    include: PathMatcher | None = None
    exclude: PathMatcher | None = None


def _and(current: PathMatcher | None, extra: PathMatcher | None) -> PathMatcher | None:
    if current is None:
        return extra
    if extra is None:
        return current
    return All(current, extra)


def _or(current: PathMatcher | None, extra: PathMatcher | None) -> PathMatcher | None:
    if current is None:
        return extra
    if extra is None:
        return current
    return Any(current, extra)


class ChangeDetectionBuilder:
    """
    Collects roots and include/exclude matchers, then `generate()` writes one
    `rerun-if-changed` directive per discovered file.

    Repeated `include()` calls narrow (AND); repeated `exclude()` calls widen (OR).
    Exclusion always wins over inclusion. Matchers may be `PathMatcher`s, glob
    strings, or plain callables taking a `Path`.

    A builder is single-use: after `generate()` every further call raises
    `BuilderStateError`.
    """

    def __init__(self) -> None:
        self._roots: list[Root] = []
        self._include: PathMatcher | None = None
        self._exclude: PathMatcher | None = None
        self._prefix: str = DEFAULT_PREFIX
        self._watch_directories: bool = False
        self._generated: bool = False

    @property
    def roots(self) -> tuple[Root, ...]:
        return tuple(self._roots)

    @property
    def include_matcher(self) -> PathMatcher | None:
        return self._include

    @property
    def exclude_matcher(self) -> PathMatcher | None:
        return self._exclude

    def path(self, path: PathArg) -> ChangeDetectionBuilder:
        """Add a file or directory root. Existence is checked at generation time."""
        return self._add_root(path)

    def path_include(self, path: PathArg, include: MatcherLike) -> ChangeDetectionBuilder:
        """Add a root whose files must also match `include`."""
        return self._add_root(path, include=as_matcher(include))

    def path_exclude(self, path: PathArg, exclude: MatcherLike) -> ChangeDetectionBuilder:
        """Add a root whose files must also not match `exclude`."""
        return self._add_root(path, exclude=as_matcher(exclude))

    def path_filter(
        self, path: PathArg, include: MatcherLike, exclude: MatcherLike
    ) -> ChangeDetectionBuilder:
        """Add a root with both a root-specific include and exclude filter."""
        return self._add_root(path, include=as_matcher(include), exclude=as_matcher(exclude))

    def include(self, matcher: MatcherLike) -> ChangeDetectionBuilder:
        self._check_open()
        self._include = _and(self._include, as_matcher(matcher))
        return self

    def exclude(self, matcher: MatcherLike) -> ChangeDetectionBuilder:
        self._check_open()
        self._exclude = _or(self._exclude, as_matcher(matcher))
        return self

    def filter(self, include: MatcherLike, exclude: MatcherLike) -> ChangeDetectionBuilder:
        return self.include(include).exclude(exclude)

    def prefix(self, prefix: str) -> ChangeDetectionBuilder:
        """Set the directive prefix (default `cargo`)."""
        self._check_open()
        self._prefix = prefix
        return self

    def watch_directories(self, enabled: bool = True) -> ChangeDetectionBuilder:
        """Also emit directories, so the host notices files being added or removed."""
        self._check_open()
        self._watch_directories = enabled
        return self

    def collect(self) -> ResultSet:
        """
        Walk every root and return the deduplicated, sorted paths without
        emitting anything. Raises on the first root that can't be resolved.
        """
        self._check_open()
        sequences = []
        for root in self._roots:
            include = _and(self._include, root.include)
            exclude = _or(self._exclude, root.exclude)
            sequences.append(
                list(
                    traverse(
                        root.path,
                        include,
                        exclude,
                        watch_directories=self._watch_directories,
                    )
                )
            )
        return collect(*sequences)

    def generate(self, stream: TextIO | None = None) -> ResultSet:
        """
        Collect all paths, then write the directives to `stream` (stdout by
        default). Nothing is written if collection fails. Terminal.
        """
        result = self.collect()
        self._generated = True
        emit(result, stream, self._prefix)
        return result

    def _add_root(
        self,
        path: PathArg,
        include: PathMatcher | None = None,
        exclude: PathMatcher | None = None,
    ) -> ChangeDetectionBuilder:
        self._check_open()
        self._roots.append(Root(Path(path), include, exclude))
        return self

    def _check_open(self) -> None:
        if self._generated:
            raise BuilderStateError(
                "generate() was already called on this builder; create a new one"
            )


def path(path: PathArg) -> ChangeDetectionBuilder:
    """Start a builder with one root. `path("src/hello.c").generate()`"""
    return ChangeDetectionBuilder().path(path)


def path_include(path: PathArg, include: MatcherLike) -> ChangeDetectionBuilder:
    return ChangeDetectionBuilder().path_include(path, include)


def path_exclude(path: PathArg, exclude: MatcherLike) -> ChangeDetectionBuilder:
    return ChangeDetectionBuilder().path_exclude(path, exclude)


def path_filter(
    path: PathArg, include: MatcherLike, exclude: MatcherLike
) -> ChangeDetectionBuilder:
    return ChangeDetectionBuilder().path_filter(path, include, exclude)


def include(matcher: MatcherLike) -> ChangeDetectionBuilder:
    """Start a builder with a global include filter."""
    return ChangeDetectionBuilder().include(matcher)


def exclude(matcher: MatcherLike) -> ChangeDetectionBuilder:
    """Start a builder with a global exclude filter."""
    return ChangeDetectionBuilder().exclude(matcher)


def filter(include: MatcherLike, exclude: MatcherLike) -> ChangeDetectionBuilder:  # noqa: A001
    return ChangeDetectionBuilder().filter(include, exclude)
