"""
Composable path predicates.

Usage::

    from change_detection.path_matchers import Exact, Glob, Not

    matcher = Glob("**/*.c") & Not(Exact("src/generated.c"))
    matcher.matches("src/main.c")  # True
"""

from change_detection.path_matchers.matchers import (
    All,
    Any,
    Exact,
    Glob,
    MatcherLike,
    Not,
    Predicate,
    as_matcher,
)
from change_detection.path_matchers.types import PathMatcher, normalize_path, path_forms

__all__ = [
    "All",
    "Any",
    "Exact",
    "Glob",
    "MatcherLike",
    "Not",
    "PathMatcher",
    "Predicate",
    "as_matcher",
    "normalize_path",
    "path_forms",
]
