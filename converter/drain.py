import codecs
import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)

# ffmpeg output is forwarded here so it can be tuned separately from pipeline logs
ffmpeg_logger = logging.getLogger("converter.ffmpeg")

CHUNK_SIZE = 64 * 1024


def log_sink(label: str, level: int) -> Callable[[str], None]:
    def sink(text: str) -> None:
        for line in text.splitlines():
            line = line.rstrip()
            if line:
                ffmpeg_logger.log(level, "[%s] %s", label, line)
    return sink


class StreamDrain(threading.Thread):
    """
    Reads a byte stream to EOF, decoding it as UTF-8 and handing text to `sink`.

    Runs next to the process wait so a chatty child never blocks on a full pipe.
    Errors stop this drain only; they are logged and never re-raised.
    """

    def __init__(self, stream, sink: Callable[[str], None], label: str):
        super().__init__(name=f"drain-{label}", daemon=True)
        self.stream = stream
        self.sink = sink
        self.label = label
        self.bytes_read = 0

    def run(self) -> None:
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            while True:
                chunk = self.stream.read1(CHUNK_SIZE)
                if not chunk:
                    break
                self.bytes_read += len(chunk)
                text = decoder.decode(chunk)
                if text:
                    self.sink(text)
            tail = decoder.decode(b"", final=True)
            if tail:
                self.sink(tail)
        except Exception:
            logger.exception("Drain %s stopped after %d bytes", self.label, self.bytes_read)
        finally:
            try:
                self.stream.close()
            except OSError:
                logger.debug("Drain %s: closing stream failed", self.label, exc_info=True)


def start_drains(handle, job_label: str) -> tuple[StreamDrain, StreamDrain]:
    """Start stdout and stderr drains for a running transcode."""
    drains = (
        StreamDrain(handle.stdout, log_sink(f"{job_label} stdout", logging.INFO), f"{job_label}-stdout"),
        StreamDrain(handle.stderr, log_sink(f"{job_label} stderr", logging.INFO), f"{job_label}-stderr"),
    )
    for drain in drains:
        drain.start()
    return drains
