from django.conf import settings

from edulearn.aws import get_aws_client


def get_s3_client():
    return get_aws_client("s3")


def presign_video(s3, s3_key):
    """Time-limited GET url for a video object; errors from S3 propagate."""
    return s3.generate_presigned_url(
        'get_object',
        Params={'Bucket': settings.S3_BUCKET_NAME, 'Key': s3_key},
        ExpiresIn=settings.S3_PRESIGNED_EXPIRES
    )
