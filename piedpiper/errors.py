# piedpiper/errors.py

from pathlib import Path
from typing import Optional


class PiedPiperError(Exception):
    """Base class for every error raised while flattening a tree."""


class ConfigLoadError(PiedPiperError):
    """Config file could not be read, parsed or validated. Recoverable."""


class DestinationResetError(PiedPiperError):
    """Destination folder could not be cleared or created. Aborts the run."""


class WalkError(PiedPiperError):
    """
    A recoverable failure tied to one path in the source tree.
    The walker records these and moves on to the next sibling.
    """

    kind = "walk"

    def __init__(self, path: Path, cause: Optional[OSError] = None):
        self.path = Path(path)
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{self.kind} failed for {self.path}{detail}")


class DirectoryListError(WalkError):
    kind = "listing"


class StatError(WalkError):
    kind = "stat"


class CopyError(WalkError):
    kind = "copy"

    def __init__(self, path: Path, destination: Path, cause: Optional[OSError] = None):
        self.destination = Path(destination)
        super().__init__(path, cause)
