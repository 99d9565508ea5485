from django import forms
from pydantic import ValidationError as PydanticValidationError

from edulearn.content import ContentKind, content_ref_for, resolve_content
from quiz.schemas import QuestionListAdapter


class QuizForm(forms.Form):
    title = forms.CharField(label="Quiz Title", max_length=128)
    description = forms.CharField(label="Description", widget=forms.Textarea, required=False)
    content_type = forms.ChoiceField(label="Content Type", choices=ContentKind.choices)
    content_id = forms.IntegerField(label="Content", min_value=1)
    questions = forms.CharField(
        label="Questions",
        widget=forms.Textarea(attrs={"rows": 12}),
        help_text='JSON list, e.g. [{"question": "2 + 2?", "options": ["3", "4"], "correct_answer": 1}]',
    )

    def clean_questions(self):
        raw = self.cleaned_data["questions"]

        try:
            questions = QuestionListAdapter.validate_json(raw)
        except PydanticValidationError as e:
            messages = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in e.errors()]
            raise forms.ValidationError(messages)

        if not questions:
            raise forms.ValidationError("A quiz needs at least one question.")

        return questions

    def clean(self):
        cleaned_data = super().clean()
        content_type = cleaned_data.get("content_type")
        content_id = cleaned_data.get("content_id")

        if content_type and content_id:
            ref = content_ref_for(content_type, content_id)

            if resolve_content(ref) is None:
                self.add_error("content_id", f"No {content_type} exists with id {content_id}.")
            else:
                cleaned_data["content_ref"] = ref

        return cleaned_data


class AnswerForm(forms.Form):
    ACTIONS = ["select", "next", "previous", "submit"]

    action = forms.ChoiceField(choices=[(action, action) for action in ACTIONS])
    question_id = forms.IntegerField(required=False)
    option = forms.IntegerField(required=False, min_value=0)
