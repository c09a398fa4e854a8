import logging
import os
from typing import Callable, Optional

from batchmux.config.models import normalize_extension
from batchmux.domain.errors import RemovalError

# (input_path, output_path) -> None; raises TranscodeError on failure.
Transcoder = Callable[[str, str], None]


class ConversionTask:
    """Converts one file: transcode to the target extension, then delete the source.

    The source is removed only after the transcoder returns normally. There
    are no retries and no timeout; a running task is never interrupted.

    Args:
        transcoder: Callable that writes output_path from input_path.
        source_extension: Extension of the files being converted.
        target_extension: Extension substituted into the output name.
        remove: Function used to delete the source (os.remove by default).
    """

    def __init__(
        self,
        transcoder: Transcoder,
        source_extension: str = ".mkv",
        target_extension: str = ".mp4",
        remove: Optional[Callable[[str], None]] = None,
    ):
        self.transcoder = transcoder
        self.source_extension = normalize_extension(source_extension)
        self.target_extension = normalize_extension(target_extension)
        self._remove = remove or os.remove
        self.logger = logging.getLogger(__name__)

    def output_path_for(self, path: str) -> str:
        # Only the file name is rewritten, first occurrence of the extension.
        directory, name = os.path.split(str(path))
        new_name = name.replace(self.source_extension, self.target_extension, 1)
        return os.path.join(directory, new_name)

    def convert(self, path: str) -> str:
        """Runs the conversion and returns the output path.

        Raises:
            TranscodeError: transcoder failed; the source is left alone.
            RemovalError: output written but the source could not be deleted.
        """
        path = str(path)
        output_path = self.output_path_for(path)

        self.logger.info(f"Converting {path} to {output_path}")
        self.transcoder(path, output_path)

        self.logger.info(f"Removing {path}")
        try:
            self._remove(path)
        except OSError as exc:
            raise RemovalError(f"cannot remove {path}: {exc}") from exc

        return output_path
