from botocore.exceptions import ClientError
from django.conf import settings
from celery import shared_task

from videos.utils import get_s3_client

import logging

from videos.models import Video

logger = logging.getLogger("edulearn")


@shared_task
def delete_s3_file(s3_key: str):

    s3 = get_s3_client()

    if s3 is None:
        raise Exception("S3 Client not initialized")

    try:
        s3.delete_object(Bucket=settings.S3_BUCKET_NAME, Key=s3_key)
    except (ClientError, Exception) as e:
        logger.error(e)
        raise e
    else:
        return True


@shared_task(bind=True)
def upload_video_to_s3(self, video_id: int):

    status_msg = "processing"

    try:
        video = Video.objects.get(pk=video_id)
    except Video.DoesNotExist:
        logger.error(f"Video does not exist with id {video_id}")
        return None

    video.status = status_msg
    video.celery_task_id = self.request.id
    video.save(update_fields=["status", "celery_task_id"])

    s3_key = video.build_s3_key()

    try:
        s3 = get_s3_client()

        if s3 is None:
            raise Exception("S3 Client not initialized")

        with video.upload_file.open('rb') as file_obj:
            s3.upload_fileobj(file_obj, settings.S3_BUCKET_NAME, s3_key)

    except (ClientError, Exception) as e:
        logger.error(e)
        status_msg = "error"
        raise e

    else:
        status_msg = "completed"
        # The staging copy is no longer needed once S3 holds the video
        video.upload_file.delete(save=False)
        video.s3_key = s3_key
        return s3_key

    finally:
        video.status = status_msg
        video.save()
