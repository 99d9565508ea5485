from django import forms
from django.forms import ModelForm

from courses.models import Course, CourseContent
from edulearn.content import content_ref_for, resolve_content


class CourseForm(ModelForm):

    class Meta:
        model = Course

        fields = ["title", "subject", "description", "thumbnail"]


class CourseContentForm(ModelForm):

    class Meta:
        model = CourseContent

        fields = ["content_type", "content_id", "order_index"]

    def __init__(self, *args, course=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.course = course

    def clean(self):
        cleaned_data = super().clean()
        content_type = cleaned_data.get("content_type")
        content_id = cleaned_data.get("content_id")

        if content_type and content_id is not None:
            ref = content_ref_for(content_type, content_id)

            if resolve_content(ref) is None:
                raise forms.ValidationError(f"No {content_type} exists with id {content_id}.")

            if self.course is not None and ref.as_pair() == ("course", self.course.pk):
                raise forms.ValidationError("A course cannot contain itself.")

            if self.course is not None and CourseContent.objects.filter(
                    course=self.course, content_type=content_type, content_id=content_id).exists():
                raise forms.ValidationError("This item is already part of the course.")

        return cleaned_data
