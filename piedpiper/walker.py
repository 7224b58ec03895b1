# piedpiper/walker.py
"""
Tree Walker & Renamer
---------------------
Depth-first walk of a source tree that copies every eligible file into one
flat destination folder, encoding the file's root-relative folder path in its
new name:

    functions/fetchTournaments/fetchTournaments.js
        -> functions_fetchTournaments_fetchTournaments.js

Failures below the top level never abort the walk. An unreadable directory
skips that subtree, an entry that cannot be stat'ed or copied skips that
entry; each one is logged and kept in the WalkReport.
"""

import logging
import os
import shutil
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from piedpiper.config import Config
from piedpiper.errors import CopyError, DirectoryListError, StatError, WalkError

logger = logging.getLogger(__name__)


# -------------------------
# Records
# -------------------------

@dataclass(frozen=True)
class RenameRecord:
    source: Path
    segments: Tuple[str, ...]
    destination_name: str
    destination: Path

    @property
    def relative_path(self) -> str:
        return "/".join(self.segments + (self.source.name,))


@dataclass
class Collision:
    destination_name: str
    overwritten: Path
    winner: Path


@dataclass
class WalkReport:
    target_dir: Path
    by_name: Dict[str, RenameRecord] = field(default_factory=dict)
    skipped: int = 0
    errors: List[WalkError] = field(default_factory=list)
    collisions: List[Collision] = field(default_factory=list)

    @property
    def copied(self) -> List[RenameRecord]:
        return [self.by_name[name] for name in sorted(self.by_name)]

    def record_copy(self, record: RenameRecord) -> None:
        earlier = self.by_name.get(record.destination_name)
        if earlier is not None:
            logger.warning(
                "Name collision: %s overwrote %s as %s",
                record.source, earlier.source, record.destination_name,
            )
            self.collisions.append(
                Collision(record.destination_name, earlier.source, record.source)
            )
        self.by_name[record.destination_name] = record

    def record_error(self, error: WalkError) -> None:
        logger.error("%s", error)
        self.errors.append(error)


# -------------------------
# Rules
# -------------------------

def _split_prefix(prefix: str) -> Tuple[str, ...]:
    return tuple(p for p in prefix.replace("\\", "/").split("/") if p)


def relative_segments(directory: Path, root: Path) -> Tuple[str, ...]:
    """Non-empty path components between `root` and `directory`."""
    rel = os.path.relpath(directory, root)
    return tuple(p for p in Path(rel).parts if p not in ("", "."))


def matches_ignored_pattern(filename: str, patterns) -> bool:
    """Only `*.<ext>` suffix globs are understood; anything else never matches."""
    for pattern in patterns:
        if pattern.startswith("*.") and filename.endswith(pattern[1:]):
            return True
    return False


def is_ignored_folder(name: str, segments: Tuple[str, ...], config: Config) -> bool:
    """
    True when `name` is listed in ignoredFolders, or when its location
    falls under one of the ignoredFolders prefixes.

    The default comparison works on whole path segments. With
    legacy_prefix_match the containing directory's root-relative path is
    tested as a raw string prefix, so `dist` also catches `distribution/...`.
    """
    if name in config.ignored_folders:
        return True

    if config.legacy_prefix_match:
        rel_dir = "/".join(segments)
        return any(
            rel_dir.startswith(ignored.replace("\\", "/"))
            for ignored in config.ignored_folders
        )

    own = segments + (name,)
    for ignored in config.ignored_folders:
        parts = _split_prefix(ignored)
        if parts and own[:len(parts)] == parts:
            return True
    return False


def is_ignored_file(name: str, config: Config) -> bool:
    return name in config.ignored_files or matches_ignored_pattern(
        name, config.ignored_patterns
    )


def matches_filter(segments: Tuple[str, ...], filter_token: Optional[str]) -> bool:
    if not filter_token:
        return True
    constructed = "_".join(segments)
    return filter_token.lower() in constructed.lower()


def destination_name(segments: Tuple[str, ...], basename: str, extensions_to_append_txt) -> str:
    """
    Folder segments joined with `_` in front of the file name, plus `.txt`
    for listed extensions and for files with no extension at all.
    """
    name = "_".join(segments + (basename,)) if segments else basename

    ext = os.path.splitext(basename)[1]
    if ext in extensions_to_append_txt:
        name += ".txt"
    elif not ext:
        name += ".txt"
    return name


# -------------------------
# Walk
# -------------------------

def _copy_file(
    source: Path,
    segments: Tuple[str, ...],
    config: Config,
    report: WalkReport,
) -> None:
    new_name = destination_name(segments, source.name, config.extensions_to_append_txt)
    target_path = Path(config.target_folder) / new_name

    try:
        shutil.copyfile(source, target_path)
    except OSError as e:
        report.record_error(CopyError(source, target_path, e))
        return

    report.record_copy(RenameRecord(source, segments, new_name, target_path))
    logger.info("Copied: %s -> %s", source, target_path)


def walk(
    current_dir,
    root_dir,
    config: Config,
    filter_token: Optional[str] = None,
    report: Optional[WalkReport] = None,
) -> WalkReport:
    """Flatten `current_dir` (a directory at or below `root_dir`) into config.target_folder."""
    current_dir = Path(current_dir)
    root_dir = Path(root_dir)
    if report is None:
        report = WalkReport(target_dir=Path(config.target_folder).resolve())

    logger.debug("Processing directory: %s", current_dir)
    try:
        items = sorted(entry.name for entry in current_dir.iterdir())
    except OSError as e:
        report.record_error(DirectoryListError(current_dir, e))
        return report

    if not items:
        logger.debug("No items found in %s", current_dir)

    segments = relative_segments(current_dir, root_dir)

    for item in items:
        full_path = current_dir / item
        try:
            st = full_path.stat()
        except OSError as e:
            report.record_error(StatError(full_path, e))
            continue

        if is_ignored_folder(item, segments, config):
            logger.info("Skipping ignored folder: %s", full_path)
            report.skipped += 1
            continue

        if stat.S_ISDIR(st.st_mode):
            if full_path.resolve() == report.target_dir:
                logger.info("Skipping target folder: %s", full_path)
                continue
            walk(full_path, root_dir, config, filter_token, report)

        elif stat.S_ISREG(st.st_mode):
            if is_ignored_file(item, config):
                logger.info("Skipping ignored file: %s", full_path)
                report.skipped += 1
                continue

            if not matches_filter(segments, filter_token):
                logger.info("Skipping file not matching filter: %s", full_path)
                report.skipped += 1
                continue

            _copy_file(full_path, segments, config, report)

        else:
            logger.debug("Skipping special file: %s", full_path)

    return report
