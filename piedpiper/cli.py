#!/usr/bin/env python3
"""
Pied Piper — flatten a project tree into one folder
---------------------------------------------------
Clears (or creates) the target folder, copies every eligible file of the
source tree into it under a name that encodes its original folder path, and
finishes with a README.md describing the result.

Usage:
    piedpiper                   # flatten the working directory into ./pipe
    piedpiper fetch             # only files whose folder path contains "fetch"
    piedpiper --config other.yaml --strict
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from piedpiper.config import load_config
from piedpiper.errors import DestinationResetError
from piedpiper.output_folder import reset_target_folder
from piedpiper.summary import write_summary
from piedpiper.walker import walk

logger = logging.getLogger("piedpiper")


def setup_logging(verbosity: int) -> None:
    level = {-1: logging.WARNING, 0: logging.INFO, 1: logging.DEBUG}[verbosity]
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="piedpiper",
        description="Flatten a directory tree into a single folder of path-named files",
    )
    parser.add_argument(
        "filter",
        nargs="?",
        help="only include files whose folder path contains this text (case-insensitive)",
    )
    parser.add_argument("--root", default=".", help="source directory to flatten")
    parser.add_argument("--config", help="config file (default: .piedpiper.json in the working directory)")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="exit with status 1 if any file or folder was skipped because of an error",
    )
    noise = parser.add_mutually_exclusive_group()
    noise.add_argument("-v", "--verbose", action="store_const", const=1, dest="verbosity", default=0)
    noise.add_argument("-q", "--quiet", action="store_const", const=-1, dest="verbosity")
    return parser


def run(
    root: Path,
    cwd: Path,
    filter_token: Optional[str] = None,
    config_path: Optional[Path] = None,
    strict: bool = False,
) -> int:
    if filter_token:
        logger.info("Filtering files containing: %s", filter_token)

    config = load_config(cwd, config_path)
    target = Path(config.target_folder)
    if not target.is_absolute():
        # target is relative to the working directory, not to the source root
        config = config.merged({"targetFolder": str(cwd / target)})

    logger.info("Starting file organization...")
    try:
        reset_target_folder(config.target_folder, source_root=root)
        report = walk(root, root, config, filter_token)
        summary_path = write_summary(config, report, filter_token)
    except DestinationResetError as e:
        logger.error("%s", e)
        print(f"[ABORT] Could not prepare {config.target_folder}")
        return 1
    except Exception:
        logger.exception("An unexpected error occurred")
        print("[ABORT] File organization failed")
        return 1

    print("[OK] File organization complete")
    print(f"     Copied:  {len(report.copied)} file(s) into {config.target_folder}")
    print(f"     Skipped: {report.skipped} ignored, {len(report.errors)} on error")
    if report.collisions:
        print(f"     Collisions: {len(report.collisions)}")
    print(f"     Summary: {summary_path}")

    if strict and report.errors:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbosity)

    cwd = Path.cwd()
    root = Path(args.root)
    if not root.is_absolute():
        root = cwd / root

    return run(
        root,
        cwd,
        filter_token=args.filter,
        config_path=Path(args.config) if args.config else None,
        strict=args.strict,
    )


if __name__ == "__main__":
    sys.exit(main())
