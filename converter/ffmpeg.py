import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .exceptions import SpawnFailure
from .jobs import PLAYLIST_NAME

logger = logging.getLogger(__name__)

SEGMENT_PATTERN = "segment%03d.ts"


class TranscodeHandle:
    """A running ffmpeg process with its stdout/stderr pipes."""

    def __init__(self, process: subprocess.Popen):
        self.process = process

    @property
    def pid(self) -> int:
        return self.process.pid

    @property
    def stdout(self):
        return self.process.stdout

    @property
    def stderr(self):
        return self.process.stderr

    def wait(self, timeout: Optional[float] = None) -> int:
        """Block until exit and return the exit code. Raises subprocess.TimeoutExpired."""
        return self.process.wait(timeout=timeout)

    def terminate(self, grace: float = 3.0) -> int:
        self.process.terminate()
        try:
            return self.process.wait(timeout=grace)
        except subprocess.TimeoutExpired:
            self.process.kill()
            return self.process.wait()


class FFmpegHlsInvoker:
    """
    Builds and starts the fixed H.264/AAC VOD HLS profile:
    10s segments named segment000.ts, segment001.ts, ... next to index.m3u8.
    """

    def __init__(self, command: Sequence[str] = ("ffmpeg",), segment_seconds: int = 10):
        if not command:
            raise ValueError("ffmpeg command must not be empty")
        self.command = list(command)
        self.segment_seconds = segment_seconds

    def build_command(self, source_path: Path, output_dir: Path) -> list[str]:
        output_dir = Path(output_dir)
        return [
            *self.command,
            "-i", str(source_path),
            "-codec:v", "libx264",
            "-codec:a", "aac",
            "-hls_time", str(self.segment_seconds),
            "-hls_playlist_type", "vod",
            "-hls_segment_filename", str(output_dir / SEGMENT_PATTERN),
            "-start_number", "0",
            str(output_dir / PLAYLIST_NAME),
        ]

    @staticmethod
    def ensure_output_dir(output_dir: Path) -> None:
        Path(output_dir).mkdir(parents=True, exist_ok=True)

    def start(self, source_path: Path, output_dir: Path) -> TranscodeHandle:
        self.ensure_output_dir(output_dir)
        cmd = self.build_command(source_path, output_dir)
        logger.debug("ffmpeg command: %s", " ".join(cmd))
        try:
            # Both pipes must be drained by the caller or ffmpeg stalls on a full buffer.
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as e:
            raise SpawnFailure(f"could not start {self.command[0]}: {e}") from e
        return TranscodeHandle(process)
