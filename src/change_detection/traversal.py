"""
Walks one root path and yields the files that pass the include/exclude policy.
"""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from pathlib import Path

from change_detection.errors import ConfigurationError, TraversalIOError
from change_detection.path_matchers import PathMatcher
from change_detection.path_matchers.types import PathArg


def accepts(
    path: Path,
    base: Path,
    include: PathMatcher | None = None,
    exclude: PathMatcher | None = None,
) -> bool:
    """
    Filter policy: included (or no include filter) and not excluded.
    Exclusion always wins.
    """
    if include is not None and not include.matches(path, base):
        return False
    if exclude is not None and exclude.matches(path, base):
        return False
    return True


def traverse(
    root: PathArg,
    include: PathMatcher | None = None,
    exclude: PathMatcher | None = None,
    *,
    watch_directories: bool = False,
) -> Iterator[Path]:
    """
    Yield accepted paths under `root`.

    The root itself is checked eagerly, so a missing or unreadable root raises
    `ConfigurationError` from this call rather than on first iteration. The
    returned iterator is lazy and single-pass.

    A file root is yielded as-is (if accepted). A directory root is walked
    depth-first with entries sorted by name. Directory symlinks are followed at
    most once per resolved target; file symlinks are yielded like files;
    dangling symlinks and special files are skipped. With `watch_directories`,
    accepted directories are yielded too, before their contents.
    """
    root_path = Path(root)
    try:
        st = root_path.stat()
    except FileNotFoundError as e:
        raise ConfigurationError(f"Path not found: {root_path}") from e
    except OSError as e:
        raise ConfigurationError(f"Path not accessible: {root_path}: {e.strerror or e}") from e

    if stat.S_ISREG(st.st_mode):
        return _single_file(root_path, include, exclude)
    if stat.S_ISDIR(st.st_mode):
        if not os.access(root_path, os.R_OK | os.X_OK):
            raise ConfigurationError(f"Directory not readable: {root_path}")
        visited: set[str] = set()
        return _walk(root_path, root_path, include, exclude, watch_directories, visited)
    raise ConfigurationError(f"Not a regular file or directory: {root_path}")


def _single_file(
    path: Path, include: PathMatcher | None, exclude: PathMatcher | None
) -> Iterator[Path]:
    if accepts(path, path.parent, include, exclude):
        yield path


def _scan(directory: Path) -> list[os.DirEntry[str]]:
    """List a directory's entries in whatever order the OS returns them."""
    try:
        with os.scandir(directory) as entries:
            return list(entries)
    except OSError as e:
        raise TraversalIOError(f"Cannot list directory {directory}: {e.strerror or e}") from e


def _walk(
    directory: Path,
    base: Path,
    include: PathMatcher | None,
    exclude: PathMatcher | None,
    watch_directories: bool,
    visited: set[str],
) -> Iterator[Path]:
    visited.add(os.path.realpath(directory))

    if watch_directories and accepts(directory, base, include, exclude):
        yield directory

    for entry in sorted(_scan(directory), key=lambda e: e.name):
        path = directory / entry.name
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
            is_link = entry.is_symlink()
        except OSError as e:
            raise TraversalIOError(f"Cannot stat {path}: {e.strerror or e}") from e

        if is_dir:
            # Links into already-entered directories (including ancestors) would loop.
            if is_link and os.path.realpath(path) in visited:
                continue
            yield from _walk(path, base, include, exclude, watch_directories, visited)
        elif is_file:
            if accepts(path, base, include, exclude):
                yield path
