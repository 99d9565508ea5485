import logging
from dataclasses import dataclass, field
from typing import List, Optional

from django.db import DatabaseError, transaction

from quiz.models import Quiz, QuizAttempt

logger = logging.getLogger("edulearn")

# Nothing in storage guarantees row order, so questions are always read with this one
QUESTION_ORDERING = ("question_number", "created_at", "pk")


class QuizLoadError(Exception):
    pass


class QuizNotFound(QuizLoadError):
    pass


class EmptyQuizError(QuizLoadError):
    pass


@dataclass
class LoadedQuiz:
    quiz: Quiz
    questions: List[object]
    attempt: Optional[QuizAttempt] = None
    answers: List[object] = field(default_factory=list)

    @property
    def already_attempted(self) -> bool:
        return self.attempt is not None


def ordered_questions(quiz):
    return quiz.questions.order_by(*QUESTION_ORDERING)


def load_quiz(quiz_id, user) -> LoadedQuiz:
    """
    Fetch a quiz, its questions in a stable order and ``user``'s attempt at it.

    Raises ``QuizNotFound`` for an unknown id, ``EmptyQuizError`` for a quiz
    without questions and ``QuizLoadError`` when the database fails.
    """
    try:
        # A savepoint keeps the request's transaction usable after a failed read
        with transaction.atomic():
            quiz = Quiz.objects.filter(pk=quiz_id).first()

            if quiz is None:
                raise QuizNotFound(f"Quiz {quiz_id} does not exist")

            questions = list(ordered_questions(quiz))

            if not questions:
                raise EmptyQuizError(f"Quiz {quiz_id} has no questions")

            attempt = QuizAttempt.objects.filter(user=user, quiz=quiz).first()
            answers = list(attempt.answers.select_related("question")) if attempt is not None else []

    except DatabaseError as e:
        logger.error(e)
        raise QuizLoadError(f"Could not load quiz {quiz_id}") from e

    logger.debug(f"Loaded quiz {quiz.pk} with {len(questions)} questions for user {user.pk}")

    return LoadedQuiz(quiz=quiz, questions=questions, attempt=attempt, answers=answers)
