import os

from django.core.validators import FileExtensionValidator, MinValueValidator
from django.db import models
from django.contrib.auth.models import User

from videos.validators import validate_video_file_size

STATUS_CHOICES = [
        ('uploaded', 'Uploaded'),
        ('processing', 'Processing'),
        ('completed', 'Completed'),
        ('error', 'Error'),
    ]

VIDEO_EXTENSIONS = ["mp4", "webm", "mov", "mkv"]
THUMBNAIL_EXTENSIONS = ["jpg", "jpeg", "png", "webp"]


def video_directory_path(instance, filename):
    # Staging copy; the celery task moves it to S3
    return 'videos/staging/{0}'.format(filename)


def thumbnail_directory_path(instance, filename):
    return 'videos/thumbnails/{0}'.format(filename)


class Video(models.Model):
    title = models.CharField(max_length=255)
    subject = models.CharField(max_length=128, blank=True)
    description = models.TextField(blank=True)
    duration_minutes = models.PositiveIntegerField(null=True, blank=True, validators=[MinValueValidator(1)])
    video_url = models.URLField(max_length=500, blank=True)
    upload_file = models.FileField(upload_to=video_directory_path, blank=True,
                                   validators=[FileExtensionValidator(VIDEO_EXTENSIONS), validate_video_file_size])
    thumbnail = models.FileField(upload_to=thumbnail_directory_path, blank=True,
                                 validators=[FileExtensionValidator(THUMBNAIL_EXTENSIONS)])
    s3_key = models.CharField(max_length=255, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='uploaded')
    celery_task_id = models.CharField(max_length=255, null=True, blank=True)
    uploaded_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title

    def build_s3_key(self):
        extension = os.path.splitext(self.upload_file.name)[1].lower() or ".mp4"
        return f"videos/{self.pk}{extension}"
