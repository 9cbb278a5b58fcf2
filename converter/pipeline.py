import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from django.core.files.uploadedfile import UploadedFile

from .drain import start_drains
from .exceptions import (
    AllConversionsFailed,
    NoValidFiles,
    SpawnFailure,
    TranscodeFailure,
    TranscodeTimeout,
)
from .ffmpeg import FFmpegHlsInvoker
from .jobs import Job, derive_job, new_job_id

logger = logging.getLogger(__name__)

# Transcodes in flight per request. 1 keeps a burst upload from starting N ffmpegs at once.
JOB_CONCURRENCY = 1

SUCCESS_MESSAGE = "Videos converted to HLS format"


class Status:
    CONVERTED = "converted"
    SPAWN_FAILED = "spawn_failed"
    TRANSCODE_FAILED = "transcode_failed"
    TIMED_OUT = "timed_out"


@dataclass
class FileOutcome:
    job: Job
    status: str
    exit_code: Optional[int] = None
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == Status.CONVERTED


@dataclass
class BatchResult:
    outcomes: list = field(default_factory=list)
    message: str = SUCCESS_MESSAGE

    @property
    def videos(self) -> list:
        return [o.job for o in self.outcomes if o.ok]


def collect_file_entries(data, field_name: str = "file") -> list:
    """All values sent under `field_name`, always as a list."""
    if hasattr(data, "getlist"):
        return list(data.getlist(field_name))
    value = data.get(field_name)
    if value is None:
        return []
    return list(value) if isinstance(value, (list, tuple)) else [value]


def is_file_upload(entry) -> bool:
    return isinstance(entry, UploadedFile)


def save_upload(upload: UploadedFile, dest: Path) -> None:
    dest.parent.mkdir(parents=True, exist_ok=True)
    with open(dest, "wb") as f:
        for chunk in upload.chunks():
            f.write(chunk)


class BatchOrchestrator:
    def __init__(
        self,
        *,
        media_root: Path,
        base_url: str,
        invoker: Optional[FFmpegHlsInvoker] = None,
        id_factory: Callable[[], str] = new_job_id,
        concurrency: int = JOB_CONCURRENCY,
        timeout: Optional[float] = None,
        drain_join_timeout: float = 5.0,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.media_root = Path(media_root)
        self.base_url = base_url
        self.invoker = invoker or FFmpegHlsInvoker()
        self.id_factory = id_factory
        self.concurrency = concurrency
        self.timeout = timeout or None
        self.drain_join_timeout = drain_join_timeout

    def handle_upload(self, entries) -> BatchResult:
        """
        Convert every genuine file in `entries`, in order.

        Raises NoValidFiles before touching disk when nothing is a file, and
        AllConversionsFailed once every file has been tried without success.
        Single-file failures are only logged and recorded in the outcomes.
        """
        uploads = [e for e in entries if is_file_upload(e)]
        if not uploads:
            raise NoValidFiles("No valid files uploaded.")

        if self.concurrency == 1:
            outcomes = [self.process_file(u) for u in uploads]
        else:
            # map() yields in submission order, so output order still follows input order
            with ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="transcode") as pool:
                outcomes = list(pool.map(self.process_file, uploads))

        result = BatchResult(outcomes=outcomes)
        logger.info("Batch done: %d/%d converted", len(result.videos), len(outcomes))
        if not result.videos:
            raise AllConversionsFailed(outcomes)
        return result

    def process_file(self, upload: UploadedFile) -> FileOutcome:
        job = derive_job(
            upload.name,
            media_root=self.media_root,
            base_url=self.base_url,
            id_factory=self.id_factory,
        )
        save_upload(upload, job.source_path)
        logger.info("Job %s: converting %s", job.job_id, job.original_name)

        try:
            self.transcode(job)
        except SpawnFailure as e:
            logger.error("Spawn error for file %s: %s", job.original_name, e)
            return FileOutcome(job, Status.SPAWN_FAILED, error=str(e))
        except TranscodeTimeout as e:
            logger.error("Job %s: %s for file %s, process killed", job.job_id, e, job.original_name)
            return FileOutcome(job, Status.TIMED_OUT, error=str(e))
        except TranscodeFailure as e:
            logger.error("FFmpeg process exited with code %d for file %s", e.exit_code, job.original_name)
            return FileOutcome(job, Status.TRANSCODE_FAILED, exit_code=e.exit_code, error=str(e))

        logger.info("Job %s: playlist ready at %s", job.job_id, job.playlist_path)
        return FileOutcome(job, Status.CONVERTED, exit_code=0)

    def transcode(self, job: Job) -> None:
        handle = self.invoker.start(job.source_path, job.output_dir)
        drains = start_drains(handle, job.job_id[:8])
        try:
            exit_code = handle.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            handle.terminate()
            raise TranscodeTimeout(self.timeout) from None
        finally:
            # Pipes close with the process; the outcome never waits on logging for long.
            for drain in drains:
                drain.join(self.drain_join_timeout)

        if exit_code != 0:
            raise TranscodeFailure(exit_code)
