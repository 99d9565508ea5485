from django.core.validators import FileExtensionValidator, MaxValueValidator, MinValueValidator
from django.db import models
from django.contrib.auth.models import User

from edulearn.content import ContentKind, content_ref_for

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "webp", "gif"]


def course_thumbnail_path(instance, filename):
    # file will be uploaded to MEDIA_ROOT / course_thumbnails/<filename>
    return 'course_thumbnails/{0}'.format(filename)


class Course(models.Model):
    title = models.CharField(max_length=255)
    subject = models.CharField(max_length=128, blank=True)
    description = models.TextField(blank=True)
    thumbnail = models.FileField(upload_to=course_thumbnail_path, blank=True,
                                 validators=[FileExtensionValidator(IMAGE_EXTENSIONS)])
    created_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title


class CourseContent(models.Model):
    course = models.ForeignKey(Course, on_delete=models.CASCADE, related_name="contents")
    content_type = models.CharField(max_length=20, choices=ContentKind.choices)
    content_id = models.PositiveIntegerField()
    order_index = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['course', 'content_type', 'content_id'],
                                    name='unique_content_per_course')
        ]

    @property
    def content_ref(self):
        return content_ref_for(self.content_type, self.content_id)


class ProgressStatus(models.TextChoices):
    IN_PROGRESS = "in_progress", "In progress"
    COMPLETED = "completed", "Completed"


class Progress(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE)
    content_type = models.CharField(max_length=20, choices=ContentKind.choices)
    content_id = models.PositiveIntegerField()
    status = models.CharField(max_length=20, choices=ProgressStatus.choices, default=ProgressStatus.IN_PROGRESS)
    progress_percentage = models.IntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=['user', 'content_type', 'content_id'],
                                    name='unique_progress_per_user_content')
        ]
