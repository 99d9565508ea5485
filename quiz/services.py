import logging

from django.db import transaction

from quiz.attempt import AttemptResult, QuizAttemptMachine
from quiz.models import Question, Quiz, QuizAnswer, QuizAttempt

logger = logging.getLogger("edulearn")


def session_key(quiz_id) -> str:
    return f"quiz_session_{quiz_id}"


def restore_machine(session, quiz, questions) -> QuizAttemptMachine:
    return QuizAttemptMachine.from_session(questions, session.get(session_key(quiz.pk)))


def store_machine(session, quiz, machine: QuizAttemptMachine):
    session[session_key(quiz.pk)] = machine.to_session()


def clear_machine(session, quiz):
    session.pop(session_key(quiz.pk), None)


def attempt_writer(user, quiz):
    """
    Build the ``persist`` callback for ``QuizAttemptMachine.submit``.

    The attempt is inserted with its final score and all answer rows in a
    single transaction, so a failure never leaves an attempt without its
    answers. The (user, quiz) unique constraint rejects a second attempt.
    """

    def persist(graded_answers, score):
        with transaction.atomic():
            attempt = QuizAttempt.objects.create(user=user,
                                                 quiz=quiz,
                                                 score=score,
                                                 total_questions=len(graded_answers))

            records = QuizAnswer.objects.bulk_create([
                QuizAnswer(attempt=attempt,
                           question=graded.question,
                           selected_answer=graded.selected_answer,
                           is_correct=graded.is_correct)
                for graded in graded_answers
            ])

        logger.info(f"User {user.pk} scored {score}/{len(graded_answers)} on quiz {quiz.pk}")
        return AttemptResult(attempt=attempt, answers=records)

    return persist


def create_quiz_with_questions(*, title, description, content_ref, created_by, questions) -> Quiz:
    """Write a quiz and its questions together; ``questions`` are ``QuestionPayload`` items in display order."""
    content_type, content_id = content_ref.as_pair()

    with transaction.atomic():
        quiz = Quiz.objects.create(title=title,
                                   description=description,
                                   content_type=content_type,
                                   content_id=content_id,
                                   created_by=created_by)

        Question.objects.bulk_create([
            Question(quiz=quiz,
                     question_text=payload.question,
                     options=payload.options,
                     correct_answer=payload.correct_answer,
                     question_number=number)
            for number, payload in enumerate(questions, start=1)
        ])

    return quiz
