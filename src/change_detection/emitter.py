"""Renders a `ResultSet` as build-script change detection directives."""

from __future__ import annotations

import sys
from collections.abc import Iterable
from typing import TextIO

from change_detection.errors import ConfigurationError

DEFAULT_PREFIX = "cargo"


def format_directive(path: str, prefix: str = DEFAULT_PREFIX) -> str:
    """
    One directive line, e.g. `cargo:rerun-if-changed=static/a.txt`, without the
    trailing newline. A prefix of `cargo:` gives the `cargo::` form.

    Raises `ConfigurationError` for a path with a line break, or one that isn't
    valid Unicode (an undecodable file name read from disk).
    """
    if "\n" in path or "\r" in path:
        raise ConfigurationError(
            f"Path can't be written as a directive (contains a newline): {path!r}"
        )
    try:
        path.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ConfigurationError(f"Path can't be converted to a UTF-8 string: {path!r}") from e
    return f"{prefix}:rerun-if-changed={path}"


def emit(
    paths: Iterable[str], stream: TextIO | None = None, prefix: str = DEFAULT_PREFIX
) -> int:
    """
    Write one directive per path, in order, to `stream` (stdout by default).
    All lines are rendered before the first is written, so a bad path emits
    nothing. Returns the number of lines written.
    """
    lines = [format_directive(path, prefix) + "\n" for path in paths]
    out = stream if stream is not None else sys.stdout
    for line in lines:
        out.write(line)
    out.flush()
    return len(lines)
