from django import forms
from django.forms import ModelForm, Textarea

from videos.models import Video


class VideoForm(ModelForm):

    class Meta:
        model = Video

        fields = ["title", "subject", "description", "duration_minutes", "video_url", "upload_file", "thumbnail"]

        widgets = {
            "description": Textarea(attrs={
                "rows": 5,
                "cols": 40,
                "placeholder": "What is this video about?"
            }),
        }

    def clean(self):
        cleaned_data = super().clean()
        video_url = cleaned_data.get("video_url")
        upload_file = cleaned_data.get("upload_file")

        if not video_url and not upload_file:
            raise forms.ValidationError("Provide either a video URL or a video file.")

        if video_url and upload_file:
            raise forms.ValidationError("Provide a video URL or a video file, not both.")

        return cleaned_data
