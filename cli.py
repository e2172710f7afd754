#!/usr/bin/env python3
"""
Dependency Cache CLI

Builds the dependency graph of an asset tree and answers "what does this
item depend on" and "does A depend on B" queries against it.
"""

import argparse
import logging
import sys
import tomllib
from pathlib import Path

from cache import UNLIMITED_DEPTH, DependencyCache
from scanner.settings import ScanSettings, load_settings


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="depcache",
        description="Build the dependency graph of an asset tree and query it.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  depcache Assets                              # Build and print a summary
  depcache Assets --progress                   # Report every checkpoint
  depcache Assets --node <guid>                # Dependencies and references of one item
  depcache Assets --depends-on <guid> <guid>   # Transitive dependency check
  depcache Assets --depends-on <a> <b> --depth 1
  depcache Assets --config depcache.toml --exclude Plugins/ "*.txt"
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Asset root directory (default: current directory)",
    )

    # Settings
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="TOML settings file",
    )

    parser.add_argument(
        "--exclude",
        nargs="+",
        default=None,
        help="Path filters (globs or substrings) of items to skip",
    )

    parser.add_argument(
        "--include-ext",
        nargs="+",
        default=None,
        help="Only list files with these extensions (e.g., .prefab .asset)",
    )

    parser.add_argument(
        "--exclude-dir",
        nargs="+",
        default=None,
        help="Additional directory names to exclude",
    )

    parser.add_argument(
        "--step",
        type=int,
        default=None,
        help="Properties visited between two progress checkpoints",
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Print one line per build checkpoint to stderr",
    )

    # Queries
    parser.add_argument(
        "--node",
        metavar="ID",
        default=None,
        help="Print the dependencies and references of one content ID",
    )

    parser.add_argument(
        "--depends-on",
        nargs=2,
        metavar=("FROM", "TO"),
        default=None,
        help="Print whether FROM depends on TO",
    )

    parser.add_argument(
        "--depth",
        type=int,
        default=UNLIMITED_DEPTH,
        help="Maximum hops for --depends-on (default: unlimited)",
    )

    # Logging
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log every scanned item",
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors",
    )

    return parser.parse_args(args)


def configure_logging(parsed) -> None:
    """Configure root logging from the verbosity flags."""
    level = logging.WARNING
    if parsed.verbose:
        level = logging.DEBUG
    elif parsed.quiet:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_settings(parsed) -> ScanSettings:
    """Load settings from --config, then apply command line overrides."""
    settings = load_settings(Path(parsed.config)) if parsed.config else ScanSettings()

    if parsed.exclude:
        settings.exclude_filters = list(settings.exclude_filters) + parsed.exclude

    if parsed.include_ext:
        include_ext = set()
        for ext in parsed.include_ext:
            if not ext.startswith("."):
                ext = "." + ext
            include_ext.add(ext.lower())
        settings.include_extensions = include_ext

    if parsed.exclude_dir:
        settings.exclude_dirs = set(settings.exclude_dirs) | set(parsed.exclude_dir)

    if parsed.step is not None:
        if parsed.step < 1:
            raise ValueError(f"--step must be positive, got {parsed.step}")
        settings.properties_per_step = parsed.step

    return settings


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)
    configure_logging(parsed)

    root = Path(parsed.root).resolve()
    if not root.is_dir():
        print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
        return 1

    try:
        settings = build_settings(parsed)
    except (OSError, ValueError, tomllib.TOMLDecodeError) as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    cache = DependencyCache.from_directory(root, settings)

    # Build the graph
    try:
        if parsed.progress:
            for operation in cache.build_async():
                current = operation.item_being_processed
                label = current.relative_to(root).as_posix() if current else "done"
                print(
                    f"[{operation.processed_items}/{operation.total_items}] {label}",
                    file=sys.stderr,
                )
            failures = operation.failures
        else:
            failures = cache.build().failures
    except OSError as e:
        print(f"Error scanning assets: {e}", file=sys.stderr)
        return 1

    for path, message in failures:
        print(f"Warning: {message}", file=sys.stderr)

    # Answer the query
    if parsed.depends_on:
        from_id, to_id = parsed.depends_on
        found = cache.has_dependency(from_id, to_id, parsed.depth)
        print("true" if found else "false")
    elif parsed.node:
        node = cache.try_get_node(parsed.node)
        if node is None:
            print(f"Error: unknown content ID '{parsed.node}'", file=sys.stderr)
            return 1
        print(f"{node.id}")
        print("dependencies:")
        for content_id in sorted(node.dependencies):
            print(f"  {content_id}")
        print("references:")
        for content_id in sorted(node.references):
            print(f"  {content_id}")
    else:
        print(
            f"{len(cache.store)} nodes, {cache.store.edge_count()} edges, "
            f"{len(failures)} unreadable items"
        )

    return 0


if __name__ == "__main__":
    sys.exit(main())
