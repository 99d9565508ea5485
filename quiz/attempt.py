"""
The in-progress side of taking a quiz.

``QuizAttemptMachine`` owns the current question pointer and the answer map
for one quiz-taking session::

    Answering(current_index, answers) -> Submitting -> Completed(result)
                                                    -> SubmissionFailed

Scoring compares option indexes only, never option text, so two options
with the same wording are still told apart.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

logger = logging.getLogger("edulearn")


class AttemptState(str, enum.Enum):
    ANSWERING = "answering"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    SUBMISSION_FAILED = "submission_failed"


class AttemptError(Exception):
    pass


class InvalidTransition(AttemptError):
    pass


class IncompleteAnswersError(AttemptError):

    def __init__(self, missing_question_ids):
        self.missing_question_ids = list(missing_question_ids)
        super().__init__(f"{len(self.missing_question_ids)} question(s) still need an answer")


class SubmissionError(AttemptError):
    pass


@dataclass
class GradedAnswer:
    question: object
    selected_answer: int
    is_correct: bool


@dataclass
class AttemptResult:
    """What the results page needs: the stored attempt and one answer record per question."""
    attempt: object
    answers: List[object] = field(default_factory=list)


def is_correct_answer(question, selected_answer) -> bool:
    return selected_answer is not None and int(selected_answer) == int(question.correct_answer)


def grade_answers(questions, answers: Dict[int, int]) -> List[GradedAnswer]:
    return [
        GradedAnswer(question=question,
                     selected_answer=answers.get(question.pk),
                     is_correct=is_correct_answer(question, answers.get(question.pk)))
        for question in questions
    ]


def compute_score(questions, answers: Dict[int, int]) -> int:
    return sum(1 for graded in grade_answers(questions, answers) if graded.is_correct)


class QuizAttemptMachine:

    def __init__(self, questions, current_index: int = 0, answers: Optional[Dict[int, int]] = None):
        self.questions = list(questions)

        if not self.questions:
            raise ValueError("A quiz attempt needs at least one question")

        self._questions_by_id = {question.pk: question for question in self.questions}

        self.current_index = min(max(int(current_index), 0), self.last_index)
        self.answers: Dict[int, int] = {}
        for question_id, option_index in (answers or {}).items():
            # Drop stale entries for questions that are no longer part of the quiz
            if int(question_id) in self._questions_by_id:
                self.answers[int(question_id)] = int(option_index)

        self.state = AttemptState.ANSWERING
        self.result: Optional[AttemptResult] = None
        self.error: Optional[Exception] = None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def last_index(self) -> int:
        return len(self.questions) - 1

    @property
    def current_question(self):
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == self.last_index

    @property
    def answered_count(self) -> int:
        return len(self.answers)

    def missing_question_ids(self) -> List[int]:
        return [question.pk for question in self.questions if question.pk not in self.answers]

    def is_complete(self) -> bool:
        return self.answered_count == self.total_questions

    def score(self) -> int:
        return compute_score(self.questions, self.answers)

    def _require_state(self, *states):
        if self.state not in states:
            raise InvalidTransition(f"Not allowed while {self.state.value}")

    def select_answer(self, question_id: int, option_index: int):
        self._require_state(AttemptState.ANSWERING, AttemptState.SUBMISSION_FAILED)

        question = self._questions_by_id.get(int(question_id))
        if question is None:
            raise AttemptError(f"Question {question_id} is not part of this quiz")

        option_index = int(option_index)
        if not 0 <= option_index < len(question.options):
            raise AttemptError(f"Option {option_index} does not exist for question {question_id}")

        self.answers[question.pk] = option_index
        self.state = AttemptState.ANSWERING

    def advance(self):
        self._require_state(AttemptState.ANSWERING, AttemptState.SUBMISSION_FAILED)

        if self.current_index >= self.last_index:
            raise InvalidTransition("Already at the last question")

        self.current_index += 1
        self.state = AttemptState.ANSWERING

    def retreat(self):
        self._require_state(AttemptState.ANSWERING, AttemptState.SUBMISSION_FAILED)

        if self.current_index <= 0:
            raise InvalidTransition("Already at the first question")

        self.current_index -= 1
        self.state = AttemptState.ANSWERING

    def submit(self, persist: Callable[[List[GradedAnswer], int], AttemptResult]) -> AttemptResult:
        """
        Grade the answers and hand them to ``persist``.

        ``persist`` receives the graded answers and the score and returns the
        stored ``AttemptResult``. Incomplete answers raise
        ``IncompleteAnswersError`` without calling it. A failure inside
        ``persist`` leaves the answers untouched and the machine in
        ``SUBMISSION_FAILED`` so that ``submit`` can be called again.
        """
        self._require_state(AttemptState.ANSWERING, AttemptState.SUBMISSION_FAILED)

        missing = self.missing_question_ids()
        if missing:
            raise IncompleteAnswersError(missing)

        self.state = AttemptState.SUBMITTING

        graded = grade_answers(self.questions, self.answers)
        score = sum(1 for answer in graded if answer.is_correct)

        try:
            result = persist(graded, score)
        except Exception as e:
            logger.error(e)
            self.state = AttemptState.SUBMISSION_FAILED
            self.error = e
            raise SubmissionError("Could not save the quiz attempt") from e

        self.state = AttemptState.COMPLETED
        self.result = result
        self.error = None
        return result

    def to_session(self) -> dict:
        # Session data is JSON so question ids become string keys
        return {
            "current_index": self.current_index,
            "answers": {str(question_id): option for question_id, option in self.answers.items()},
        }

    @classmethod
    def from_session(cls, questions, data: Optional[dict]):
        data = data or {}
        return cls(questions, current_index=data.get("current_index", 0), answers=data.get("answers"))
