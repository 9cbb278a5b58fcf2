from rest_framework import serializers


class ConvertedVideoSerializer(serializers.Serializer):
    videoId = serializers.CharField(source="job_id")
    videoUrl = serializers.CharField(source="public_url")
    originalFileName = serializers.CharField(source="original_name")


class FileStatusSerializer(serializers.Serializer):
    """Per-file outcome, only sent when the client asks for it."""
    originalFileName = serializers.CharField(source="job.original_name")
    videoId = serializers.CharField(source="job.job_id")
    status = serializers.CharField()
    exitCode = serializers.IntegerField(source="exit_code", allow_null=True)
    error = serializers.CharField(allow_blank=True)


class UploadResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    videos = ConvertedVideoSerializer(many=True)
