from typing import List

from pydantic import BaseModel, Field, TypeAdapter, field_validator, model_validator


class QuestionPayload(BaseModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=2)
    correct_answer: int

    @field_validator("question")
    @classmethod
    def question_not_blank(cls, value):
        value = value.strip()
        if not value:
            raise ValueError("Question text cannot be blank")
        return value

    @field_validator("options")
    @classmethod
    def options_not_blank(cls, value):
        options = [option.strip() for option in value]
        if any(not option for option in options):
            raise ValueError("Every option needs text")
        return options

    @model_validator(mode="after")
    def correct_answer_in_range(self):
        if not 0 <= self.correct_answer < len(self.options):
            raise ValueError(f"correct_answer must be between 0 and {len(self.options) - 1}")
        return self


QuestionListAdapter = TypeAdapter(List[QuestionPayload])
