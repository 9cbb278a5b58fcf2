import shlex
import sys
import textwrap
from pathlib import Path

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile

from converter.ffmpeg import FFmpegHlsInvoker
from converter.pipeline import BatchOrchestrator

# Stands in for ffmpeg: behaviour is picked from the input file name.
FAKE_FFMPEG = textwrap.dedent(
    """
    import os
    import sys
    import time

    args = sys.argv[1:]
    src = args[args.index("-i") + 1]
    name = os.path.basename(src)

    if name.startswith("broken"):
        sys.stderr.write("Invalid data found when processing input\\n")
        sys.exit(1)
    if name.startswith("slow"):
        time.sleep(30)
    if name.startswith("noisy"):
        # far more than an OS pipe buffer on both channels
        for i in range(20000):
            sys.stderr.write("frame=%d fps=25 q=28.0 size=1kB time=00:00:01.00\\n" % i)
            sys.stdout.write("progress line %d\\n" % i)
        sys.stderr.flush()
        sys.stdout.flush()

    segment = args[args.index("-hls_segment_filename") + 1]
    with open(segment % 0, "wb") as f:
        f.write(b"\\x47" * 188)
    with open(args[-1], "w") as f:
        f.write("#EXTM3U\\n#EXT-X-VERSION:3\\n#EXT-X-PLAYLIST-TYPE:VOD\\n"
                "#EXT-X-TARGETDURATION:10\\n#EXTINF:10.0,\\nsegment000.ts\\n#EXT-X-ENDLIST\\n")
    print("muxing done")
    """
)


@pytest.fixture
def fake_ffmpeg(tmp_path) -> list:
    script = tmp_path / "fake_ffmpeg.py"
    script.write_text(FAKE_FFMPEG)
    return [sys.executable, str(script)]


@pytest.fixture
def media_root(tmp_path) -> Path:
    root = tmp_path / "media"
    root.mkdir()
    return root


@pytest.fixture
def sequential_ids():
    counter = {"n": 0}

    def factory():
        counter["n"] += 1
        return f"id-{counter['n']}"

    return factory


@pytest.fixture
def orchestrator(media_root, fake_ffmpeg, sequential_ids):
    return BatchOrchestrator(
        media_root=media_root,
        base_url="http://localhost:5000",
        invoker=FFmpegHlsInvoker(command=fake_ffmpeg),
        id_factory=sequential_ids,
        timeout=20,
    )


@pytest.fixture
def app_settings(settings, media_root, fake_ffmpeg):
    settings.HLS_MEDIA_ROOT = media_root
    settings.HLS_PUBLIC_BASE_URL = "http://localhost:5000"
    settings.FFMPEG_BIN = " ".join(shlex.quote(part) for part in fake_ffmpeg)
    settings.TRANSCODE_TIMEOUT_SECONDS = 20
    settings.TRANSCODE_CONCURRENCY = 1
    return settings


def video(name: str, content: bytes = b"\x00\x00\x00\x18ftypmp42") -> SimpleUploadedFile:
    return SimpleUploadedFile(name, content, content_type="video/mp4")
