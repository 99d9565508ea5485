import enum
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional


class OptionState(str, enum.Enum):
    CORRECT = "correct"
    INCORRECT_PICK = "incorrect_pick"
    NEUTRAL = "neutral"


@dataclass
class OptionReview:
    index: int
    text: str
    state: OptionState
    selected: bool


@dataclass
class QuestionReview:
    number: int
    question: object
    options: List[OptionReview]
    selected_answer: Optional[int]
    is_correct: bool


def score_percentage(score: int, total: int) -> int:
    """Whole-number percentage, rounding halves up (1 of 8 is 13%, not 12%)."""
    if total <= 0:
        raise ValueError("A percentage needs at least one question")

    percentage = Decimal(score * 100) / Decimal(total)
    return int(percentage.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def option_state(index: int, question, selected_answer: Optional[int]) -> OptionState:
    if index == question.correct_answer:
        return OptionState.CORRECT

    if selected_answer is not None and index == selected_answer:
        return OptionState.INCORRECT_PICK

    return OptionState.NEUTRAL


def review_question(question, answer_record, number: int = 1) -> QuestionReview:
    selected = answer_record.selected_answer if answer_record is not None else None

    options = [
        OptionReview(index=index,
                     text=text,
                     state=option_state(index, question, selected),
                     selected=index == selected)
        for index, text in enumerate(question.options)
    ]

    return QuestionReview(number=number,
                          question=question,
                          options=options,
                          selected_answer=selected,
                          is_correct=bool(answer_record is not None and answer_record.is_correct))


def build_review(questions, answer_records) -> List[QuestionReview]:
    """Pair every question with its stored answer record, in question order."""
    records_by_question = {record.question_id: record for record in answer_records}

    return [
        review_question(question, records_by_question.get(question.pk), number=number)
        for number, question in enumerate(questions, start=1)
    ]
