"""
Polymorphic references from quizzes, course items and progress rows to the
course, book or video they point at.

Rows store the reference as a ``(content_type, content_id)`` pair. In code it
is one of ``CourseRef``, ``BookRef`` or ``VideoRef`` so the table being pointed
at is always named by the variant, never by a loose string.
"""
from dataclasses import dataclass
from typing import ClassVar, Optional, Union

from django.apps import apps
from django.db import models


class ContentKind(models.TextChoices):
    COURSE = "course", "Course"
    BOOK = "book", "Book"
    VIDEO = "video", "Video"


@dataclass(frozen=True)
class _ContentRefBase:
    content_id: int

    kind: ClassVar[ContentKind]
    model_label: ClassVar[str]

    @property
    def model(self):
        return apps.get_model(self.model_label)

    def as_pair(self):
        return self.kind.value, self.content_id


@dataclass(frozen=True)
class CourseRef(_ContentRefBase):
    kind = ContentKind.COURSE
    model_label = "courses.Course"


@dataclass(frozen=True)
class BookRef(_ContentRefBase):
    kind = ContentKind.BOOK
    model_label = "library.Book"


@dataclass(frozen=True)
class VideoRef(_ContentRefBase):
    kind = ContentKind.VIDEO
    model_label = "videos.Video"


ContentRef = Union[CourseRef, BookRef, VideoRef]

_REF_BY_KIND = {ref.kind.value: ref for ref in (CourseRef, BookRef, VideoRef)}


def content_ref_for(content_type: str, content_id: int) -> ContentRef:
    try:
        ref_class = _REF_BY_KIND[str(content_type)]
    except KeyError:
        raise ValueError(f"Unknown content type: {content_type!r}")

    return ref_class(content_id=int(content_id))


def resolve_content(ref: ContentRef) -> Optional[models.Model]:
    """Return the row ``ref`` points at, or ``None`` when it no longer exists."""
    return ref.model.objects.filter(pk=ref.content_id).first()
