import shlex
from pathlib import Path

from django.conf import settings
from django.http import HttpResponse
from django.views.decorators.http import require_safe
from django.views.static import serve
from rest_framework import status, views
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .exceptions import AllConversionsFailed, NoValidFiles
from .ffmpeg import FFmpegHlsInvoker
from .jobs import CONVERTED_DIR, UPLOADS_DIR
from .pipeline import BatchOrchestrator, collect_file_entries
from .serializers import FileStatusSerializer, UploadResponseSerializer

TRUTHY = {"1", "true", "yes", "on"}


def plain_text(body: str, status_code: int) -> HttpResponse:
    return HttpResponse(body, status=status_code, content_type="text/plain; charset=utf-8")


def public_base_url(request) -> str:
    return settings.HLS_PUBLIC_BASE_URL or request.build_absolute_uri("/").rstrip("/")


def build_orchestrator(request) -> BatchOrchestrator:
    invoker = FFmpegHlsInvoker(command=shlex.split(settings.FFMPEG_BIN))
    return BatchOrchestrator(
        media_root=settings.HLS_MEDIA_ROOT,
        base_url=public_base_url(request),
        invoker=invoker,
        concurrency=settings.TRANSCODE_CONCURRENCY,
        timeout=settings.TRANSCODE_TIMEOUT_SECONDS,
    )


class IndexView(views.APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def get(self, request):
        return plain_text("Hello World!", status.HTTP_200_OK)


class UploadView(views.APIView):
    """
    Accepts one or more multipart parts named "file", converts each to HLS
    with ffmpeg (one at a time by default) and returns the playlist URLs of the
    ones that converted. Files that fail are left out of "videos"; pass
    ?include_status=1 to also get a per-file "files" list.
    """
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        include_status = request.query_params.get("include_status", "").lower() in TRUTHY
        entries = collect_file_entries(request.data, "file")
        orchestrator = build_orchestrator(request)

        try:
            result = orchestrator.handle_upload(entries)
        except NoValidFiles:
            return plain_text("No valid files uploaded.", status.HTTP_400_BAD_REQUEST)
        except AllConversionsFailed as e:
            if include_status:
                return Response(
                    {
                        "message": "Error converting videos.",
                        "videos": [],
                        "files": FileStatusSerializer(e.outcomes, many=True).data,
                    },
                    status=status.HTTP_500_INTERNAL_SERVER_ERROR,
                )
            return plain_text("Error converting videos.", status.HTTP_500_INTERNAL_SERVER_ERROR)

        data = UploadResponseSerializer(result).data
        if include_status:
            data["files"] = FileStatusSerializer(result.outcomes, many=True).data
        return Response(data, status=status.HTTP_200_OK)


@require_safe
def converted_file(request, path):
    """Serve playlists and segments written under uploads/converted/."""
    root = Path(settings.HLS_MEDIA_ROOT) / UPLOADS_DIR / CONVERTED_DIR
    return serve(request, path, document_root=root)
