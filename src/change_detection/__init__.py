"""
Generate build-script change detection directives for files and directories.

Usage::

    import change_detection
    from change_detection.path_matchers import Glob

    (
        change_detection.exclude(Glob("another_path/**/*.tmp"))
        .path("static")
        .path("another_path")
        .path("build.rs")
        .generate()
    )

Each discovered file produces one line such as `cargo:rerun-if-changed=static/a.txt`
on stdout. Output is deduplicated and sorted, so it is identical across runs.
"""

from change_detection.builder import (
    ChangeDetectionBuilder,
    Root,
    exclude,
    filter,
    include,
    path,
    path_exclude,
    path_filter,
    path_include,
)
from change_detection.collector import ResultSet, collect
from change_detection.emitter import DEFAULT_PREFIX, emit, format_directive
from change_detection.errors import (
    BuilderStateError,
    ChangeDetectionError,
    ConfigurationError,
    PatternError,
    TraversalIOError,
)
from change_detection.traversal import traverse

__all__ = [
    "DEFAULT_PREFIX",
    "BuilderStateError",
    "ChangeDetectionBuilder",
    "ChangeDetectionError",
    "ConfigurationError",
    "PatternError",
    "ResultSet",
    "Root",
    "TraversalIOError",
    "collect",
    "emit",
    "exclude",
    "filter",
    "format_directive",
    "include",
    "path",
    "path_exclude",
    "path_filter",
    "path_include",
    "traverse",
]
