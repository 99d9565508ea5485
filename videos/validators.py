from django.conf import settings
from django.core.exceptions import ValidationError

import logging

logger = logging.getLogger("edulearn")


def validate_video_file_size(value):
    max_mb = settings.MAX_VIDEO_UPLOAD_MB
    size_mb = value.size / (1024 * 1024)
    logger.debug(f"video upload size is {size_mb:.1f} MB")
    if size_mb > max_mb:
        raise ValidationError(f"Video is too large: {size_mb:.0f} MB (max {max_mb} MB)")
