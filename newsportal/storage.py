"""
Storage backend for the S3-compatible media bucket (article images,
e-paper PDFs and thumbnails) with proper content type handling
"""

import mimetypes

from storages.backends.s3boto3 import S3Boto3Storage

FALLBACK_CONTENT_TYPES = {
    "pdf": "application/pdf",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}


class BucketMediaStorage(S3Boto3Storage):
    """
    S3Boto3Storage that sets ContentType and an inline ContentDisposition so
    PDFs and images open in the browser instead of downloading
    """

    location = "media"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        mimetypes.init()

    def get_object_parameters(self, name):
        params = super().get_object_parameters(name)

        content_type = self._get_content_type(name)
        params["ContentType"] = content_type
        if content_type == "application/pdf" or content_type.startswith("image/"):
            params["ContentDisposition"] = "inline"

        return params

    def _get_content_type(self, name):
        content_type, _ = mimetypes.guess_type(name)
        if content_type:
            return content_type

        extension = name.split(".")[-1].lower()
        return FALLBACK_CONTENT_TYPES.get(extension, "application/octet-stream")
