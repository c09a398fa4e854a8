import os
import stat
from pathlib import Path
from typing import Generator, Union
from batchmux.config.models import normalize_extension
from batchmux.domain.errors import (
    EnumerationError,
    InvalidInputError,
    TargetNotADirectoryError,
    TargetNotFoundError,
)

PathLike = Union[str, Path]

class FileScanner:
    """Finds files ending in a given extension, one directory level or the whole tree."""

    def __init__(self, extension: str):
        self.extension = normalize_extension(extension)

    def matches(self, path: PathLike) -> bool:
        return os.path.basename(str(path)).endswith(self.extension)

    def check_file(self, path: PathLike) -> str:
        """Returns the path as a job string, or raises if the extension is wrong."""
        path = str(path)
        if not self.matches(path):
            raise InvalidInputError(f"{path} is not a {self.extension} file")
        return path

    def scan(self, root_dir: PathLike, recursive: bool = False) -> Generator[str, None, None]:
        """Yields matching file paths under root_dir.

        Entries are visited in name order and subdirectories are descended
        into at their position, so output is stable for a given tree.
        Symlinked directories are not followed.
        """
        root = str(root_dir)
        try:
            info = os.stat(root)
        except FileNotFoundError as exc:
            raise TargetNotFoundError(f"{root} does not exist") from exc
        except OSError as exc:
            raise EnumerationError(f"cannot stat {root}: {exc}") from exc

        if not stat.S_ISDIR(info.st_mode):
            raise TargetNotADirectoryError(f"{root} not a directory")

        yield from self._scan_dir(root, recursive)

    def _scan_dir(self, directory: str, recursive: bool) -> Generator[str, None, None]:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise EnumerationError(f"cannot list {directory}: {exc}") from exc

        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                if recursive:
                    yield from self._scan_dir(entry.path, recursive)
                continue

            if entry.name.endswith(self.extension):
                yield entry.path
