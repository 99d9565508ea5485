from django.core.validators import FileExtensionValidator
from django.db import models

from django.contrib.auth.models import User

BOOK_EXTENSIONS = ["pdf", "epub"]
COVER_EXTENSIONS = ["jpg", "jpeg", "png", "webp"]


def book_directory_path(instance, filename):
    # file will be uploaded to MEDIA_ROOT / books/<filename>
    return 'books/{0}'.format(filename)


def cover_directory_path(instance, filename):
    return 'books/covers/{0}'.format(filename)


class Book(models.Model):
    title = models.CharField(max_length=255)
    author = models.CharField(max_length=255, blank=True)
    subject = models.CharField(max_length=128, blank=True)
    description = models.TextField(blank=True)
    tags = models.JSONField(default=list, blank=True)
    upload_file = models.FileField(upload_to=book_directory_path,
                                   validators=[FileExtensionValidator(BOOK_EXTENSIONS)])
    cover_image = models.FileField(upload_to=cover_directory_path, blank=True,
                                   validators=[FileExtensionValidator(COVER_EXTENSIONS)])
    uploaded_by = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.title
