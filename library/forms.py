from django import forms
from django.forms import ModelForm
from django.core.validators import FileExtensionValidator

from library.models import Book, BOOK_EXTENSIONS
from library.utils import parse_tags


class BookForm(ModelForm):
    tag_list = forms.CharField(label="Tags", required=False, max_length=512,
                               help_text="Comma separated, e.g. algebra, beginner")

    class Meta:
        model = Book

        fields = ["title", "author", "subject", "description", "upload_file", "cover_image"]

    def clean_upload_file(self):
        file = self.cleaned_data.get("upload_file")
        if file:
            validator = FileExtensionValidator(allowed_extensions=BOOK_EXTENSIONS)
            validator(file)
        return file

    def clean_tag_list(self):
        return parse_tags(self.cleaned_data.get("tag_list"))

    def save(self, commit=True):
        book = super().save(commit=False)
        book.tags = self.cleaned_data.get("tag_list", [])
        if commit:
            book.save()
        return book
