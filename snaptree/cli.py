"""Command-line entry point for snaptree.

Usage:
    snaptree [ROOT]                 # List ROOT (default: current directory)
    snaptree --full --total src     # Absolute paths plus totals
    snaptree --ignore ".git:build"  # Names separated by os.pathsep
"""

import argparse
import os
import sys
from typing import List, Optional

from . import __version__
from ._common.config import DEFAULT_IGNORE, DEFAULT_QUEUE_SIZE, RenderOptions, WalkConfig
from .api import ENGINES, EXIT_INITIALIZE, EXIT_OK, run


def build_parser() -> argparse.ArgumentParser:
    sep = os.pathsep
    parser = argparse.ArgumentParser(
        prog="snaptree",
        description="Concurrently snapshot a directory tree and print it.",
    )
    parser.add_argument("paths", nargs="*", metavar="ROOT", help="tree top")
    parser.add_argument("--root", default="", help="tree top")
    parser.add_argument("--version", action="store_true", help="print version")
    parser.add_argument("--verbose", action=argparse.BooleanOptionalAction, default=True,
                        help="with error log")
    parser.add_argument("--ignore", default=sep.join(DEFAULT_IGNORE),
                        help=f"ignore directory. list separator is '{sep}'")
    parser.add_argument("--nocolor", action="store_true", help="no color")
    parser.add_argument("--dirs", action="store_true", help="show directory only")
    parser.add_argument("--full", action="store_true", help="full path")
    parser.add_argument("--abort", action="store_true", help="if find error then abort process")
    parser.add_argument("--total", action="store_true",
                        help="prints total number of files and directories")
    parser.add_argument("--workers", type=int, default=None,
                        help="number of reader workers (default: CPU count)")
    parser.add_argument("--queue-size", type=int, default=DEFAULT_QUEUE_SIZE,
                        help="capacity of the pending directory queue")
    parser.add_argument("--engine", choices=ENGINES, default="thread",
                        help="traversal engine")
    return parser


def main(argv: Optional[List[str]] = None, out=None, err=None) -> int:
    """Parse ``argv`` and run.

    Returns:
        Process exit status
    """
    out = out if out is not None else sys.stdout
    err = err if err is not None else sys.stderr
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"version {__version__}", file=out)
        return EXIT_OK

    root = args.root
    if args.paths:
        if len(args.paths) == 1 and not root:
            root = args.paths[0]
        else:
            print("invalid arguments:", args.paths, file=err)
            return EXIT_INITIALIZE

    config = WalkConfig(
        workers=args.workers,
        queue_size=args.queue_size,
        abort_on_error=args.abort,
    )
    options = RenderOptions.from_ignore_string(
        args.ignore,
        full_path=args.full,
        directories_only=args.dirs,
        colorize=not args.nocolor,
        show_totals=args.total,
    )
    return run(
        root or os.curdir,
        out=out,
        err=err,
        config=config,
        options=options,
        verbose=args.verbose,
        engine=args.engine,
    )
