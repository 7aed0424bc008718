#!/usr/bin/env python3
"""
change-detection: Emit build-script rerun-if-changed directives for files and directories

Common usage:
  change-detection static build.rs
  change-detection --exclude '*.tmp' static
  change-detection --include '**/*.c' --include '**/*.h' src
  change-detection --list-files .

Paths, patterns and the prefix can also be set in `change-detection.toml` or in
`[tool.change-detection]` of `pyproject.toml`.
"""

from __future__ import annotations

import argparse
import importlib.metadata
import sys
from dataclasses import dataclass
from pathlib import Path

from change_detection.builder import ChangeDetectionBuilder
from change_detection.config import find_config_file, load_config, merge_cli_with_config
from change_detection.emitter import DEFAULT_PREFIX
from change_detection.errors import (
    BuilderStateError,
    ConfigurationError,
    PatternError,
    TraversalIOError,
)
from change_detection.path_matchers import Any, Glob


@dataclass
class Options:
    """Command-line options for the change-detection tool."""

    paths: list[str]
    include: list[str]
    exclude: list[str]
    prefix: str
    watch_directories: bool
    list_files: bool
    config: str | None
    no_config: bool
    verbose: bool
    version: bool


def _parse_args(args: list[str] | None = None) -> tuple[Options, set[str]]:
    """
    Parse command-line arguments.

    Returns `(options, explicit_flags)`, where `explicit_flags` names the options
    the user actually passed (for config merge precedence).
    """
    module_doc = __doc__ or ""
    doc_parts = module_doc.split("\n\n")
    description = doc_parts[0]
    epilog = "\n\n".join(doc_parts[1:])

    parser = argparse.ArgumentParser(
        prog="change-detection",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "paths",
        nargs="*",
        type=str,
        default=[],
        help="Files or directories to watch (directories are walked recursively)",
    )
    parser.add_argument(
        "--include",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Only watch files matching this glob pattern. Can be repeated (any may match)",
    )
    parser.add_argument(
        "--exclude",
        action="append",
        default=None,
        metavar="PATTERN",
        help="Never watch files matching this glob pattern. Can be repeated",
    )
    parser.add_argument(
        "--prefix",
        type=str,
        default=None,
        help=f"Directive prefix (default: {DEFAULT_PREFIX})",
    )
    parser.add_argument(
        "--watch-directories",
        action="store_true",
        default=None,
        dest="watch_directories",
        help="Also emit directories, to rebuild when files are added or removed",
    )
    parser.add_argument(
        "--list-files",
        action="store_true",
        dest="list_files",
        help="Print resolved file paths instead of directives",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="FILE",
        help="Read settings from this TOML file instead of searching for one",
    )
    parser.add_argument(
        "--no-config",
        action="store_true",
        dest="no_config",
        help="Don't read any config file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print a summary to stderr",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version information and exit",
    )
    opts = parser.parse_args(args)

    # Unset options are None, so anything else was passed explicitly.
    explicit_flags: set[str] = set()
    if opts.paths:
        explicit_flags.add("paths")
    for name in ("include", "exclude", "prefix", "watch_directories"):
        if getattr(opts, name) is not None:
            explicit_flags.add(name)

    return (
        Options(
            paths=opts.paths,
            include=opts.include or [],
            exclude=opts.exclude or [],
            prefix=opts.prefix if opts.prefix is not None else DEFAULT_PREFIX,
            watch_directories=bool(opts.watch_directories),
            list_files=opts.list_files,
            config=opts.config,
            no_config=opts.no_config,
            verbose=opts.verbose,
            version=opts.version,
        ),
        explicit_flags,
    )


def builder_from_options(options: Options) -> ChangeDetectionBuilder:
    """
    Build a `ChangeDetectionBuilder` from merged options. Include patterns are
    alternatives (any may match); exclude patterns each widen the exclusion.
    """
    builder = ChangeDetectionBuilder().prefix(options.prefix)
    builder.watch_directories(options.watch_directories)
    if options.include:
        builder.include(Any(*(Glob(p) for p in options.include)))
    for pattern in options.exclude:
        builder.exclude(Glob(pattern))
    for p in options.paths:
        builder.path(p)
    return builder


def main(args: list[str] | None = None) -> int:
    """
    Main entry point for the change-detection CLI.

    Args:
        args: Command-line arguments (uses sys.argv if None)

    Returns:
        Exit code (0 for success, 1 for configuration errors, 2 for I/O or other errors)
    """
    options, explicit_flags = _parse_args(args)

    if options.version:
        try:
            version = importlib.metadata.version("change-detection")
            print(f"v{version}")
        except importlib.metadata.PackageNotFoundError:
            print("unknown (package not installed)")
        return 0

    try:
        if not options.no_config:
            if options.config:
                config_path: Path | None = Path(options.config)
                if not config_path.is_file():
                    raise ConfigurationError(f"Config file not found: {options.config}")
            else:
                config_path = find_config_file(Path.cwd())
            if config_path:
                merge_cli_with_config(options, load_config(config_path), explicit_flags)

        if not options.paths:
            print(
                "Error: No paths specified. Pass files or directories, or set `paths`"
                " in a config file. Use --help for more options.",
                file=sys.stderr,
            )
            return 1

        builder = builder_from_options(options)
        if options.list_files:
            result = builder.collect()
            for p in result:
                print(p)
        else:
            result = builder.generate()
    except (ConfigurationError, PatternError, BuilderStateError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except TraversalIOError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except Exception as e:
        # Catch other potential file or processing errors.
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if options.verbose:
        print(
            f"change-detection: {len(result)} paths from {len(options.paths)} roots",
            file=sys.stderr,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
