"""Output directory staging

Responsibilities:
- Create the output directory (fatal on failure)
- Purge the previous run's output (best-effort)
- List produced media files in natural order (best-effort)
"""

import logging
import re
import shutil
from pathlib import Path
from typing import List, Tuple, Union

from .exceptions import FilesystemError

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"(\d+)")


def natural_sort_key(name: str) -> Tuple:
    """Sort key that orders embedded digit runs numerically: clip2 < clip10."""
    return tuple(
        (0, int(part), part) if part.isdigit() else (1, part.lower(), part)
        for part in _DIGITS.split(name)
    )


class OutputStager:
    """Owns the contents of one output directory between and during runs."""

    def __init__(self, output_dir: Union[str, Path], extension: str = "mp4"):
        self.output_dir = Path(output_dir)
        self.extension = extension.lstrip(".").lower()

    def ensure_directory(self) -> Path:
        """
        Create the output directory if it does not exist.

        Raises:
            FilesystemError: If the directory cannot be created, or the
                             path exists and is not a directory
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FilesystemError(
                f"Cannot create output directory '{self.output_dir}': {e}", module="staging"
            ) from e
        if not self.output_dir.is_dir():
            raise FilesystemError(
                f"Output path exists but is not a directory: {self.output_dir}", module="staging"
            )
        return self.output_dir

    def purge(self) -> List[Path]:
        """
        Delete everything inside the output directory.

        A missing directory is a no-op. Entries that cannot be removed are
        logged and left behind.

        Returns:
            Paths that could not be removed
        """
        if not self.output_dir.is_dir():
            return []
        leftovers = []
        try:
            entries = list(self.output_dir.iterdir())
        except OSError as e:
            logger.error("Failed to read output directory %s: %s", self.output_dir, e)
            return [self.output_dir]
        for entry in entries:
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.error("Failed to remove stale output %s: %s", entry, e)
                leftovers.append(entry)
        if entries:
            logger.info("Purged %d stale item(s) from %s",
                        len(entries) - len(leftovers), self.output_dir)
        return leftovers

    def list_outputs(self) -> List[str]:
        """
        Return produced media filenames, naturally sorted.

        Returns an empty list when the directory is missing, empty, or
        cannot be read.
        """
        if not self.output_dir.is_dir():
            return []
        suffix = f".{self.extension}"
        try:
            names = [
                entry.name for entry in self.output_dir.iterdir()
                if entry.is_file() and entry.suffix.lower() == suffix
            ]
        except OSError as e:
            logger.error("Failed to list output directory %s: %s", self.output_dir, e)
            return []
        return sorted(names, key=natural_sort_key)

    def output_paths(self, listing: List[str]) -> List[Path]:
        """Full paths for a listing, in the same order."""
        return [self.output_dir / name for name in listing]
