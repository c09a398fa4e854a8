import subprocess
import logging
from typing import List
from batchmux.config.models import FFmpegConfig
from batchmux.domain.errors import TranscodeError

class FFmpegAdapter:
    """Wrapper around ffmpeg for codec-preserving remuxing.

    `remux` is the transcoder handed to ConversionTask: it returns on success
    and raises TranscodeError otherwise. It has no timeout and is never
    interrupted by the pipeline.
    """

    def __init__(self, config: FFmpegConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)

    def _build_command(self, input_path: str, output_path: str) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        cmd = [
            self.config.binary,
            "-hide_banner",
            "-nostdin",
            "-loglevel", "error",
            "-y" if self.config.overwrite else "-n",
            "-i", str(input_path),
            "-codec", "copy",  # remux only, no re-encoding
        ]
        cmd.extend(self.config.extra_args)
        cmd.append(str(output_path))
        return cmd

    def remux(self, input_path: str, output_path: str) -> None:
        """Runs ffmpeg to completion; raises TranscodeError on failure."""
        cmd = self._build_command(input_path, output_path)
        self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        try:
            result = subprocess.run(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as exc:
            raise TranscodeError(f"failed to start {self.config.binary}: {exc}") from exc

        if result.returncode != 0:
            lines = [line.strip() for line in (result.stderr or "").splitlines() if line.strip()]
            message = f"ffmpeg exited with code {result.returncode}"
            if lines:
                message = f"{message}: {lines[-1]}"
            raise TranscodeError(message, returncode=result.returncode)
