import json
from unittest.mock import patch, MagicMock

from django.contrib.messages import get_messages
from django.contrib.auth.models import User
from django.db import DatabaseError, IntegrityError, transaction
from django.test import TestCase, SimpleTestCase, Client
from django.urls import reverse

from accounts.models import Profile, Role
from courses.models import Course
from edulearn.content import BookRef, CourseRef, VideoRef, content_ref_for
from library.models import Book
from quiz.attempt import (AttemptResult, AttemptState, IncompleteAnswersError, InvalidTransition, AttemptError,
                          QuizAttemptMachine, SubmissionError, compute_score)
from quiz.forms import QuizForm
from quiz.loader import EmptyQuizError, QuizLoadError, QuizNotFound, load_quiz
from quiz.models import Quiz, Question, QuizAttempt, QuizAnswer
from quiz.results import OptionState, build_review, score_percentage
from quiz.services import attempt_writer, create_quiz_with_questions, session_key


new_quiz_request_json = """
[
  {"question": "What is the capital of England?",
   "options": ["London", "Paris", "New York", "Toulouse"],
   "correct_answer": 0},
  {"question": "What is the official currency of the United States?",
   "options": ["Euro", "Dollar", "Deutschmark", "Pound"],
   "correct_answer": 1}
]
"""

out_of_range_request_json = """
[
  {"question": "What is the capital of England?",
   "options": ["London", "Paris"],
   "correct_answer": 2}
]
"""

blank_option_request_json = """
[
  {"question": "What is the capital of England?",
   "options": ["London", "   "],
   "correct_answer": 0}
]
"""


def make_questions():
    # Unsaved rows are enough for the in-memory attempt logic
    return [
        Question(pk=11, quiz_id=1, question_text="2 + 2?", options=["3", "4", "5"], correct_answer=1,
                 question_number=1),
        Question(pk=12, quiz_id=1, question_text="Capital of France?", options=["Paris", "Rome"], correct_answer=0,
                 question_number=2),
    ]


class QuizAttemptMachineTestCase(SimpleTestCase):

    def setUp(self):
        self.questions = make_questions()
        self.machine = QuizAttemptMachine(self.questions)

    def test_needs_at_least_one_question(self):
        with self.assertRaises(ValueError):
            QuizAttemptMachine([])

    def test_starts_answering_first_question(self):
        self.assertEqual(self.machine.state, AttemptState.ANSWERING)
        self.assertEqual(self.machine.current_index, 0)
        self.assertEqual(self.machine.current_question.pk, 11)
        self.assertEqual(self.machine.answers, {})
        self.assertFalse(self.machine.is_last_question)

    def test_select_answer_replaces_previous_choice(self):
        self.machine.select_answer(11, 0)
        self.machine.select_answer(11, 2)

        self.assertEqual(self.machine.answers, {11: 2})
        self.assertEqual(self.machine.answered_count, 1)

    def test_select_answer_rejects_unknown_option(self):
        with self.assertRaises(AttemptError):
            self.machine.select_answer(12, 2)

        with self.assertRaises(AttemptError):
            self.machine.select_answer(12, -1)

        self.assertEqual(self.machine.answers, {})

    def test_select_answer_rejects_foreign_question(self):
        with self.assertRaises(AttemptError):
            self.machine.select_answer(99, 0)

    def test_advance_and_retreat_stay_in_bounds(self):
        with self.assertRaises(InvalidTransition):
            self.machine.retreat()

        self.machine.advance()
        self.assertEqual(self.machine.current_index, 1)
        self.assertTrue(self.machine.is_last_question)

        with self.assertRaises(InvalidTransition):
            self.machine.advance()

        self.machine.retreat()
        self.assertEqual(self.machine.current_index, 0)

    def test_navigation_keeps_answers(self):
        self.machine.select_answer(11, 1)
        self.machine.advance()
        self.machine.select_answer(12, 1)
        self.machine.retreat()

        self.assertEqual(self.machine.answers, {11: 1, 12: 1})

    def test_submit_incomplete_does_not_persist(self):
        persist = MagicMock()
        self.machine.select_answer(11, 1)

        with self.assertRaises(IncompleteAnswersError) as ctx:
            self.machine.submit(persist)

        self.assertEqual(ctx.exception.missing_question_ids, [12])
        persist.assert_not_called()
        self.assertEqual(self.machine.state, AttemptState.ANSWERING)

    def test_submit_grades_answers(self):
        persist = MagicMock(return_value=AttemptResult(attempt="attempt"))
        self.machine.select_answer(11, 1)
        self.machine.select_answer(12, 1)

        result = self.machine.submit(persist)

        graded, score = persist.call_args[0]
        self.assertEqual(score, 1)
        self.assertEqual([answer.is_correct for answer in graded], [True, False])
        self.assertEqual([answer.selected_answer for answer in graded], [1, 1])
        self.assertEqual(self.machine.state, AttemptState.COMPLETED)
        self.assertEqual(result.attempt, "attempt")
        self.assertIs(self.machine.result, result)

    def test_completed_attempt_is_final(self):
        self.machine.select_answer(11, 1)
        self.machine.select_answer(12, 0)
        self.machine.submit(MagicMock(return_value=AttemptResult(attempt="attempt")))

        with self.assertRaises(InvalidTransition):
            self.machine.select_answer(11, 0)

        with self.assertRaises(InvalidTransition):
            self.machine.submit(MagicMock())

    def test_failed_submit_keeps_answers_and_can_retry(self):
        self.machine.select_answer(11, 1)
        self.machine.select_answer(12, 0)

        with self.assertRaises(SubmissionError) as ctx:
            self.machine.submit(MagicMock(side_effect=DatabaseError("connection lost")))

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        self.assertEqual(self.machine.state, AttemptState.SUBMISSION_FAILED)
        self.assertEqual(self.machine.answers, {11: 1, 12: 0})

        persist = MagicMock(return_value=AttemptResult(attempt="attempt"))
        self.machine.submit(persist)

        self.assertEqual(persist.call_args[0][1], 2)
        self.assertEqual(self.machine.state, AttemptState.COMPLETED)

    def test_score_uses_option_index_not_text(self):
        question = Question(pk=21, options=["Same", "Same"], correct_answer=1)
        machine = QuizAttemptMachine([question])
        machine.select_answer(21, 0)

        self.assertEqual(machine.score(), 0)

        machine.select_answer(21, 1)
        self.assertEqual(machine.score(), 1)

    def test_compute_score_counts_unanswered_as_wrong(self):
        self.assertEqual(compute_score(self.questions, {11: 1}), 1)
        self.assertEqual(compute_score(self.questions, {}), 0)

    def test_session_round_trip(self):
        self.machine.select_answer(11, 2)
        self.machine.advance()

        data = self.machine.to_session()
        self.assertEqual(data, {"current_index": 1, "answers": {"11": 2}})

        # Session storage is JSON
        restored = QuizAttemptMachine.from_session(self.questions, json.loads(json.dumps(data)))
        self.assertEqual(restored.current_index, 1)
        self.assertEqual(restored.answers, {11: 2})

    def test_from_session_drops_stale_state(self):
        restored = QuizAttemptMachine.from_session(self.questions,
                                                   {"current_index": 7, "answers": {"11": 0, "999": 1}})

        self.assertEqual(restored.current_index, 1)
        self.assertEqual(restored.answers, {11: 0})

    def test_from_session_without_data(self):
        restored = QuizAttemptMachine.from_session(self.questions, None)

        self.assertEqual(restored.current_index, 0)
        self.assertEqual(restored.answers, {})


class ResultsTestCase(SimpleTestCase):

    def test_score_percentage(self):
        self.assertEqual(score_percentage(1, 2), 50)
        self.assertEqual(score_percentage(2, 2), 100)
        self.assertEqual(score_percentage(0, 3), 0)
        self.assertEqual(score_percentage(2, 3), 67)
        self.assertEqual(score_percentage(1, 3), 33)

    def test_score_percentage_rounds_half_up(self):
        self.assertEqual(score_percentage(1, 8), 13)
        self.assertEqual(score_percentage(3, 8), 38)

    def test_score_percentage_needs_questions(self):
        with self.assertRaises(ValueError):
            score_percentage(0, 0)

    def test_build_review_marks_options(self):
        questions = make_questions()
        records = [
            QuizAnswer(question_id=12, selected_answer=1, is_correct=False),
            QuizAnswer(question_id=11, selected_answer=1, is_correct=True),
        ]

        review = build_review(questions, records)

        self.assertEqual([item.number for item in review], [1, 2])

        first, second = review
        self.assertTrue(first.is_correct)
        self.assertEqual([option.state for option in first.options],
                         [OptionState.NEUTRAL, OptionState.CORRECT, OptionState.NEUTRAL])
        self.assertTrue(first.options[1].selected)

        self.assertFalse(second.is_correct)
        self.assertEqual([option.state for option in second.options],
                         [OptionState.CORRECT, OptionState.INCORRECT_PICK])
        self.assertEqual(second.selected_answer, 1)

    def test_build_review_without_record(self):
        review = build_review(make_questions()[:1], [])

        self.assertIsNone(review[0].selected_answer)
        self.assertFalse(review[0].is_correct)
        self.assertEqual([option.state for option in review[0].options],
                         [OptionState.NEUTRAL, OptionState.CORRECT, OptionState.NEUTRAL])


class ContentRefTestCase(SimpleTestCase):

    def test_content_ref_for_each_kind(self):
        self.assertEqual(content_ref_for("course", 3), CourseRef(content_id=3))
        self.assertEqual(content_ref_for("book", "4"), BookRef(content_id=4))
        self.assertEqual(content_ref_for("video", 5), VideoRef(content_id=5))

    def test_content_ref_pair_and_model(self):
        ref = BookRef(content_id=9)

        self.assertEqual(ref.as_pair(), ("book", 9))
        self.assertIs(ref.model, Book)
        self.assertIs(CourseRef(content_id=1).model, Course)

    def test_unknown_content_type(self):
        with self.assertRaises(ValueError):
            content_ref_for("podcast", 1)


class QuizDataTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.test_user = User.objects.create_user(username='testuser', password='password')
        cls.admin_user = User.objects.create_user(username='adminuser', password='password')
        Profile.objects.create(user=cls.admin_user, role=Role.ADMIN)

        cls.course = Course.objects.create(title="Algebra", subject="Maths", created_by=cls.admin_user)

        cls.quiz = Quiz.objects.create(title="Algebra basics", content_type="course", content_id=cls.course.pk,
                                       created_by=cls.admin_user)
        # Inserted out of order on purpose
        cls.question_two = Question.objects.create(quiz=cls.quiz, question_text="Solve x + 1 = 3",
                                                   options=["1", "2", "3"], correct_answer=1, question_number=2)
        cls.question_one = Question.objects.create(quiz=cls.quiz, question_text="What is 2 times 3",
                                                   options=["5", "6"], correct_answer=1, question_number=1)

        cls.empty_quiz = Quiz.objects.create(title="Empty", content_type="course", content_id=cls.course.pk)


class QuizLoaderTestCase(QuizDataTestCase):

    def test_load_quiz_orders_questions(self):
        loaded = load_quiz(self.quiz.pk, self.test_user)

        self.assertEqual(loaded.quiz, self.quiz)
        self.assertEqual([question.pk for question in loaded.questions],
                         [self.question_one.pk, self.question_two.pk])
        self.assertFalse(loaded.already_attempted)
        self.assertEqual(loaded.answers, [])

    def test_load_quiz_same_number_falls_back_to_insertion(self):
        extra = Question.objects.create(quiz=self.quiz, question_text="Another", options=["a", "b"],
                                        correct_answer=0, question_number=2)

        loaded = load_quiz(self.quiz.pk, self.test_user)

        self.assertEqual([question.pk for question in loaded.questions],
                         [self.question_one.pk, self.question_two.pk, extra.pk])

    def test_load_quiz_not_found(self):
        with self.assertRaises(QuizNotFound):
            load_quiz(987654, self.test_user)

    def test_load_quiz_without_questions(self):
        with self.assertRaises(EmptyQuizError):
            load_quiz(self.empty_quiz.pk, self.test_user)

    @patch("quiz.loader.Quiz.objects.filter")
    def test_load_quiz_database_error(self, filter_pch):
        filter_pch.side_effect = DatabaseError("database unavailable")

        with self.assertRaises(QuizLoadError) as ctx:
            load_quiz(self.quiz.pk, self.test_user)

        self.assertNotIsInstance(ctx.exception, QuizNotFound)

    @patch("quiz.loader.transaction.atomic", wraps=transaction.atomic)
    @patch("quiz.loader.QuizAttempt.objects.filter")
    def test_load_quiz_database_error_rolls_back_to_savepoint(self, filter_pch, atomic_pch):
        filter_pch.side_effect = DatabaseError("database unavailable")

        with self.assertRaises(QuizLoadError):
            load_quiz(self.quiz.pk, self.test_user)

        atomic_pch.assert_called_once_with()
        self.assertFalse(transaction.get_connection().needs_rollback)
        self.assertEqual(Question.objects.filter(quiz=self.quiz).count(), 2)

    def test_load_quiz_with_attempt(self):
        attempt = QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=1, total_questions=2)
        QuizAnswer.objects.create(attempt=attempt, question=self.question_one, selected_answer=1, is_correct=True)
        QuizAnswer.objects.create(attempt=attempt, question=self.question_two, selected_answer=0, is_correct=False)

        loaded = load_quiz(self.quiz.pk, self.test_user)

        self.assertTrue(loaded.already_attempted)
        self.assertEqual(loaded.attempt, attempt)
        self.assertEqual(len(loaded.answers), 2)


class QuizServicesTestCase(QuizDataTestCase):

    def test_attempt_writer_stores_attempt_and_answers(self):
        machine = QuizAttemptMachine([self.question_one, self.question_two])
        machine.select_answer(self.question_one.pk, 1)
        machine.select_answer(self.question_two.pk, 2)

        result = machine.submit(attempt_writer(self.test_user, self.quiz))

        attempt = QuizAttempt.objects.get(user=self.test_user, quiz=self.quiz)
        self.assertEqual(result.attempt, attempt)
        self.assertEqual(attempt.score, 1)
        self.assertEqual(attempt.total_questions, 2)

        answers = {answer.question_id: answer for answer in attempt.answers.all()}
        self.assertEqual(answers[self.question_one.pk].selected_answer, 1)
        self.assertTrue(answers[self.question_one.pk].is_correct)
        self.assertEqual(answers[self.question_two.pk].selected_answer, 2)
        self.assertFalse(answers[self.question_two.pk].is_correct)

    def test_second_attempt_is_rejected(self):
        QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=0, total_questions=2)

        machine = QuizAttemptMachine([self.question_one, self.question_two])
        machine.select_answer(self.question_one.pk, 0)
        machine.select_answer(self.question_two.pk, 0)

        with self.assertRaises(SubmissionError) as ctx:
            machine.submit(attempt_writer(self.test_user, self.quiz))

        self.assertIsInstance(ctx.exception.__cause__, IntegrityError)
        self.assertEqual(QuizAttempt.objects.filter(user=self.test_user, quiz=self.quiz).count(), 1)

    def test_unique_constraint(self):
        QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=0, total_questions=2)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=2, total_questions=2)

    def test_create_quiz_with_questions_numbers_questions(self):
        form = QuizForm({
            "title": "Currencies",
            "description": "",
            "content_type": "course",
            "content_id": self.course.pk,
            "questions": new_quiz_request_json,
        })
        self.assertTrue(form.is_valid(), form.errors)

        quiz = create_quiz_with_questions(title="Currencies", description="",
                                          content_ref=form.cleaned_data["content_ref"],
                                          created_by=self.admin_user,
                                          questions=form.cleaned_data["questions"])

        self.assertEqual(quiz.content_ref, CourseRef(content_id=self.course.pk))
        stored = list(quiz.questions.order_by("question_number"))
        self.assertEqual([question.question_number for question in stored], [1, 2])
        self.assertEqual(stored[1].options, ["Euro", "Dollar", "Deutschmark", "Pound"])
        self.assertEqual(stored[1].correct_answer, 1)


class QuizFormTestCase(QuizDataTestCase):

    def form_data(self, **overrides):
        data = {
            "title": "Currencies",
            "description": "World currencies",
            "content_type": "course",
            "content_id": self.course.pk,
            "questions": new_quiz_request_json,
        }
        data.update(overrides)
        return data

    def test_valid_form(self):
        form = QuizForm(self.form_data())

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(len(form.cleaned_data["questions"]), 2)
        self.assertEqual(form.cleaned_data["content_ref"], CourseRef(content_id=self.course.pk))

    def test_correct_answer_out_of_range(self):
        form = QuizForm(self.form_data(questions=out_of_range_request_json))

        self.assertFalse(form.is_valid())
        self.assertIn("questions", form.errors)

    def test_blank_option(self):
        form = QuizForm(self.form_data(questions=blank_option_request_json))

        self.assertFalse(form.is_valid())
        self.assertIn("questions", form.errors)

    def test_invalid_json(self):
        form = QuizForm(self.form_data(questions="not json"))

        self.assertFalse(form.is_valid())
        self.assertIn("questions", form.errors)

    def test_no_questions(self):
        form = QuizForm(self.form_data(questions="[]"))

        self.assertFalse(form.is_valid())
        self.assertIn("A quiz needs at least one question.", form.errors["questions"])

    def test_missing_content(self):
        form = QuizForm(self.form_data(content_type="book", content_id=424242))

        self.assertFalse(form.is_valid())
        self.assertIn("content_id", form.errors)


class QuizViewTestCase(QuizDataTestCase):

    def setUp(self):
        # Every test needs a client.
        self.authenticated_client = Client()
        self.authenticated_client.login(username='testuser', password='password')
        self.admin_client = Client()
        self.admin_client.login(username='adminuser', password='password')
        self.unauthenticated_client = Client()
        self.take_url = reverse("take_quiz", kwargs={"pk": self.quiz.pk})

    def answer(self, question, option, action="select", client=None, follow=False):
        client = client or self.authenticated_client
        return client.post(self.take_url, {"question_id": question.pk, "option": option, "action": action},
                           follow=follow)

    def test_quiz_index_requires_login(self):
        response = self.unauthenticated_client.get(reverse("quiz_index"))

        self.assertEqual(response.status_code, 302)
        self.assertIn(reverse("login"), response.url)

    def test_quiz_index_lists_attempts(self):
        QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=1, total_questions=2)

        response = self.authenticated_client.get(reverse("quiz_index"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "quiz/index.html")

        rows = {row["quiz"].pk: row for row in response.context["quiz_rows"]}
        self.assertEqual(rows[self.quiz.pk]["percentage"], 50)
        self.assertEqual(rows[self.quiz.pk]["quiz"].question_count, 2)
        self.assertIsNone(rows[self.empty_quiz.pk]["attempt"])

    def test_take_quiz_shows_first_question(self):
        response = self.authenticated_client.get(self.take_url)

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "quiz/take_quiz.html")
        self.assertEqual(response.context["question"], self.question_one)
        self.assertEqual(response.context["question_number"], 1)
        self.assertEqual(response.context["total_questions"], 2)
        self.assertTrue(response.context["is_first"])
        self.assertFalse(response.context["is_last"])
        self.assertContains(response, "What is 2 times 3")

    def test_take_quiz_unknown_quiz(self):
        response = self.authenticated_client.get(reverse("take_quiz", kwargs={"pk": 987654}))

        self.assertEqual(response.status_code, 404)

    def test_take_quiz_without_questions(self):
        response = self.authenticated_client.get(reverse("take_quiz", kwargs={"pk": self.empty_quiz.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "quiz/quiz_unavailable.html")
        self.assertContains(response, "This quiz has no questions yet.")

    @patch("quiz.views.load_quiz")
    def test_take_quiz_load_failure(self, load_pch):
        load_pch.side_effect = QuizLoadError("database unavailable")

        response = self.authenticated_client.get(self.take_url)

        self.assertEqual(response.status_code, 503)
        self.assertTemplateUsed(response, "quiz/quiz_unavailable.html")

    @patch("quiz.loader.QuizAttempt.objects.filter")
    def test_take_quiz_database_error_renders_unavailable_page(self, filter_pch):
        filter_pch.side_effect = DatabaseError("database unavailable")

        response = self.authenticated_client.get(self.take_url)

        self.assertEqual(response.status_code, 503)
        self.assertTemplateUsed(response, "quiz/quiz_unavailable.html")
        self.assertContains(response, "This quiz could not be loaded. Please try again.", status_code=503)
        self.assertEqual(response.context["user_role"], Role.STUDENT)

    def test_progress_rounds_halves_up(self):
        quiz = Quiz.objects.create(title="Eight questions", content_type="course", content_id=self.course.pk)
        for number in range(1, 9):
            Question.objects.create(quiz=quiz, question_text=f"Question {number}", options=["a", "b"],
                                    correct_answer=0, question_number=number)

        response = self.authenticated_client.get(reverse("take_quiz", kwargs={"pk": quiz.pk}))

        self.assertEqual(response.context["progress"], 13)

    def test_question_id_zero_is_not_the_current_question(self):
        response = self.authenticated_client.post(self.take_url, {"question_id": 0, "option": 1,
                                                                  "action": "select"})

        self.assertEqual(response.status_code, 302)
        self.assertEqual(self.authenticated_client.session[session_key(self.quiz.pk)]["answers"], {})

        messages = [m.message for m in get_messages(response.wsgi_request)]
        self.assertIn("Question 0 is not part of this quiz", messages)

    def test_navigation_keeps_answers_in_session(self):
        self.answer(self.question_one, 1, action="next")

        session = self.authenticated_client.session[session_key(self.quiz.pk)]
        self.assertEqual(session, {"current_index": 1, "answers": {str(self.question_one.pk): 1}})

        response = self.authenticated_client.get(self.take_url)
        self.assertEqual(response.context["question"], self.question_two)
        self.assertTrue(response.context["is_last"])

        self.authenticated_client.post(self.take_url, {"action": "previous"})
        response = self.authenticated_client.get(self.take_url)

        self.assertEqual(response.context["question"], self.question_one)
        self.assertEqual(response.context["selected_answer"], 1)

    def test_submit_incomplete(self):
        self.answer(self.question_one, 1, action="next")

        response = self.authenticated_client.post(self.take_url, {"action": "submit"}, follow=True)

        self.assertContains(response, "Please answer all questions (1 remaining).")
        self.assertFalse(QuizAttempt.objects.filter(user=self.test_user, quiz=self.quiz).exists())

    def test_submit_half_correct(self):
        self.answer(self.question_one, 1, action="next")
        response = self.answer(self.question_two, 2, action="submit", follow=True)

        self.assertContains(response, "Quiz submitted successfully!")
        self.assertTemplateUsed(response, "quiz/quiz_results.html")
        self.assertEqual(response.context["percentage"], 50)

        attempt = QuizAttempt.objects.get(user=self.test_user, quiz=self.quiz)
        self.assertEqual(attempt.score, 1)
        self.assertEqual(attempt.total_questions, 2)
        self.assertEqual(attempt.answers.count(), 2)

        review = response.context["review"]
        self.assertEqual(review[1].options[2].state, OptionState.INCORRECT_PICK)
        self.assertEqual(review[1].options[1].state, OptionState.CORRECT)

        self.assertNotIn(session_key(self.quiz.pk), self.authenticated_client.session)

    def test_submit_all_correct(self):
        self.answer(self.question_one, 1, action="next")
        response = self.answer(self.question_two, 1, action="submit", follow=True)

        self.assertEqual(response.context["percentage"], 100)
        self.assertEqual(QuizAttempt.objects.get(user=self.test_user, quiz=self.quiz).score, 2)

    def test_completed_quiz_cannot_be_resubmitted(self):
        self.answer(self.question_one, 1, action="next")
        self.answer(self.question_two, 1, action="submit")

        response = self.answer(self.question_two, 0, action="submit", follow=True)

        self.assertContains(response, "You have already completed this quiz.")
        self.assertEqual(QuizAttempt.objects.filter(user=self.test_user, quiz=self.quiz).count(), 1)
        self.assertEqual(QuizAttempt.objects.get(user=self.test_user, quiz=self.quiz).score, 2)

    @patch("quiz.views.attempt_writer")
    def test_submission_failure_keeps_answers(self, writer_pch):
        writer_pch.return_value = MagicMock(side_effect=DatabaseError("connection lost"))

        self.answer(self.question_one, 1, action="next")
        response = self.answer(self.question_two, 0, action="submit", follow=True)

        self.assertContains(response, "Error submitting quiz. Your answers are kept, please try again.")
        self.assertTemplateUsed(response, "quiz/take_quiz.html")
        self.assertFalse(QuizAttempt.objects.filter(user=self.test_user, quiz=self.quiz).exists())

        session = self.authenticated_client.session[session_key(self.quiz.pk)]
        self.assertEqual(session["answers"], {str(self.question_one.pk): 1, str(self.question_two.pk): 0})

        writer_pch.return_value = attempt_writer(self.test_user, self.quiz)
        response = self.authenticated_client.post(self.take_url, {"action": "submit"}, follow=True)

        self.assertContains(response, "Quiz submitted successfully!")
        self.assertEqual(QuizAttempt.objects.get(user=self.test_user, quiz=self.quiz).score, 1)

    def test_invalid_option_is_reported(self):
        response = self.answer(self.question_one, 5, follow=True)

        self.assertContains(response, "does not exist")
        self.assertNotIn(str(self.question_one.pk),
                         self.authenticated_client.session[session_key(self.quiz.pk)]["answers"])

    def test_create_quiz_forbidden_for_student(self):
        response = self.authenticated_client.post(reverse("create_quiz"), {
            "title": "Sneaky",
            "content_type": "course",
            "content_id": self.course.pk,
            "questions": new_quiz_request_json,
        })

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Quiz.objects.filter(title="Sneaky").exists())

    def test_create_quiz_as_admin(self):
        response = self.admin_client.post(reverse("create_quiz"), {
            "title": "Currencies",
            "description": "World currencies",
            "content_type": "course",
            "content_id": self.course.pk,
            "questions": new_quiz_request_json,
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("quiz_index"))

        quiz = Quiz.objects.get(title="Currencies")
        self.assertEqual(quiz.created_by, self.admin_user)
        self.assertEqual(quiz.questions.count(), 2)

    def test_create_quiz_invalid_payload(self):
        response = self.admin_client.post(reverse("create_quiz"), {
            "title": "Broken",
            "content_type": "course",
            "content_id": self.course.pk,
            "questions": out_of_range_request_json,
        })

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "quiz/create_quiz.html")
        self.assertFalse(Quiz.objects.filter(title="Broken").exists())

    def test_delete_quiz_as_admin(self):
        QuizAttempt.objects.create(user=self.test_user, quiz=self.quiz, score=1, total_questions=2)

        response = self.admin_client.post(reverse("delete_quiz", kwargs={"pk": self.quiz.pk}))

        self.assertEqual(response.status_code, 302)
        self.assertFalse(Quiz.objects.filter(pk=self.quiz.pk).exists())
        self.assertFalse(QuizAttempt.objects.filter(quiz_id=self.quiz.pk).exists())

    def test_delete_quiz_forbidden_for_student(self):
        response = self.authenticated_client.post(reverse("delete_quiz", kwargs={"pk": self.quiz.pk}))

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Quiz.objects.filter(pk=self.quiz.pk).exists())
