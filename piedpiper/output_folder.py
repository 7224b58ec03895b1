# piedpiper/output_folder.py

import logging
import shutil
from pathlib import Path
from typing import Optional

from piedpiper.errors import DestinationResetError

logger = logging.getLogger(__name__)


def _guard_source(target: Path, source_root: Optional[Path]) -> None:
    """Refuse to clear a folder that contains the tree being flattened."""
    if source_root is None:
        return
    target = target.resolve()
    source_root = Path(source_root).resolve()
    if source_root == target or target in source_root.parents:
        raise DestinationResetError(
            f"Refusing to clear {target}: it contains the source root {source_root}"
        )


def reset_target_folder(target_folder, source_root: Optional[Path] = None) -> Path:
    """
    Leave `target_folder` existing and empty.

    Any entry that cannot be removed aborts the reset with
    DestinationResetError; the run must not continue from a half-cleared
    destination.
    """
    target = Path(target_folder)
    _guard_source(target, source_root)

    if not target.exists():
        logger.info("Creating target folder: %s", target)
        try:
            target.mkdir(parents=True)
        except OSError as e:
            raise DestinationResetError(f"Cannot create {target}: {e}") from e
        return target

    if not target.is_dir():
        raise DestinationResetError(f"{target} exists and is not a directory")

    logger.info("Clearing existing %s folder...", target)
    try:
        entries = sorted(target.iterdir())
    except OSError as e:
        raise DestinationResetError(f"Cannot list {target}: {e}") from e

    for entry in entries:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as e:
            raise DestinationResetError(f"Cannot delete {entry}: {e}") from e
        logger.debug("Deleted: %s", entry)

    return target
