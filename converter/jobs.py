import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable
from uuid import uuid4

PLAYLIST_NAME = "index.m3u8"
UPLOADS_DIR = "uploads"
CONVERTED_DIR = "converted"


@dataclass(frozen=True)
class Job:
    job_id: str
    original_name: str
    source_path: Path
    output_dir: Path
    playlist_path: Path
    public_url: str


def new_job_id() -> str:
    return str(uuid4())


def split_name(original_name: str) -> tuple[str, str]:
    """
    Return (stem, ext) for an uploaded file name.
    The stem stops at the first dot ("a.b.mp4" -> "a"); ext is the last suffix (".mp4").
    """
    stem = original_name.split(".")[0]
    ext = os.path.splitext(original_name)[1]
    return stem, ext


def derive_job(
    original_name: str,
    *,
    media_root: Path,
    base_url: str,
    id_factory: Callable[[], str] = new_job_id,
) -> Job:
    """Compute identity and every path for one upload. Touches nothing on disk."""
    job_id = id_factory()
    stem, ext = split_name(original_name)
    folder = f"{stem}-{job_id}"

    uploads = Path(media_root) / UPLOADS_DIR
    output_dir = uploads / CONVERTED_DIR / folder
    return Job(
        job_id=job_id,
        original_name=original_name,
        source_path=uploads / f"{folder}{ext}",
        output_dir=output_dir,
        playlist_path=output_dir / PLAYLIST_NAME,
        public_url=f"{base_url.rstrip('/')}/{UPLOADS_DIR}/{CONVERTED_DIR}/{folder}/{PLAYLIST_NAME}",
    )
