from django.test import TestCase, Client
from django.contrib.auth.models import User
from django.urls import reverse

from accounts.models import Profile, Role
from courses.models import Course, Progress, ProgressStatus
from edulearn.content import CourseRef, resolve_content
from edulearn.stats import get_admin_stats, get_student_stats, whole_percentage
from library.models import Book
from quiz.models import Quiz, QuizAttempt


class StatsTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.student = User.objects.create_user(username='student', password='password')
        cls.other_student = User.objects.create_user(username='otherstudent', password='password')
        cls.admin_user = User.objects.create_user(username='adminuser', password='password')
        Profile.objects.create(user=cls.admin_user, role=Role.ADMIN)
        User.objects.create_superuser(username='root', password='password', email='root@example.com')

        cls.course_1 = Course.objects.create(title="Biology")
        cls.course_2 = Course.objects.create(title="Physics")
        cls.course_3 = Course.objects.create(title="Chemistry")
        Book.objects.create(title="Campbell Biology", upload_file="books/campbell.pdf")

        cls.quiz_1 = Quiz.objects.create(title="Cells", content_type="course", content_id=cls.course_1.pk)
        cls.quiz_2 = Quiz.objects.create(title="Forces", content_type="course", content_id=cls.course_2.pk)

        QuizAttempt.objects.create(user=cls.student, quiz=cls.quiz_1, score=1, total_questions=2)
        QuizAttempt.objects.create(user=cls.student, quiz=cls.quiz_2, score=3, total_questions=3)
        QuizAttempt.objects.create(user=cls.other_student, quiz=cls.quiz_1, score=2, total_questions=2)

        Progress.objects.create(user=cls.student, content_type="course", content_id=cls.course_1.pk,
                                status=ProgressStatus.COMPLETED, progress_percentage=100)
        Progress.objects.create(user=cls.student, content_type="course", content_id=cls.course_2.pk,
                                status=ProgressStatus.IN_PROGRESS, progress_percentage=40)

    def test_whole_percentage(self):
        self.assertEqual(whole_percentage(0, 0), 0)
        self.assertEqual(whole_percentage(1, 3), 33)

    def test_student_stats(self):
        stats = get_student_stats(self.student)

        self.assertEqual(stats["total_courses"], 3)
        self.assertEqual(stats["completed_courses"], 1)
        self.assertEqual(stats["progress_percentage"], 33)
        self.assertEqual(stats["total_books"], 1)
        self.assertEqual(stats["quizzes_completed"], 2)
        self.assertEqual(stats["quizzes_available"], 2)
        # 4 of 5 answers correct across both attempts
        self.assertEqual(stats["average_quiz_percentage"], 80)

    def test_student_stats_without_activity(self):
        newcomer = User.objects.create_user(username='newcomer', password='password')

        stats = get_student_stats(newcomer)

        self.assertEqual(stats["completed_courses"], 0)
        self.assertEqual(stats["quizzes_completed"], 0)
        self.assertEqual(stats["average_quiz_percentage"], 0)

    def test_admin_stats(self):
        stats = get_admin_stats()

        self.assertEqual(stats["total_courses"], 3)
        self.assertEqual(stats["total_books"], 1)
        self.assertEqual(stats["total_students"], 2)
        self.assertEqual(stats["total_quizzes"], 2)
        self.assertEqual(stats["total_attempts"], 3)

        performance = {row["quiz"].pk: row for row in stats["quiz_performance"]}
        self.assertEqual(performance[self.quiz_1.pk]["attempt_count"], 2)
        self.assertEqual(performance[self.quiz_1.pk]["average_percentage"], 75)
        self.assertEqual(performance[self.quiz_2.pk]["average_percentage"], 100)

    def test_admin_stats_quiz_without_attempts(self):
        quiz = Quiz.objects.create(title="Untouched", content_type="course", content_id=self.course_3.pk)

        performance = {row["quiz"].pk: row for row in get_admin_stats()["quiz_performance"]}

        self.assertEqual(performance[quiz.pk]["attempt_count"], 0)
        self.assertIsNone(performance[quiz.pk]["average_percentage"])

    def test_resolve_content(self):
        self.assertEqual(resolve_content(CourseRef(content_id=self.course_1.pk)), self.course_1)
        self.assertIsNone(resolve_content(CourseRef(content_id=987654)))

    def test_student_dashboard(self):
        client = Client()
        client.login(username='student', password='password')

        response = client.get(reverse("student_dashboard"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "dashboard/student_dashboard.html")
        self.assertEqual(response.context["stats"]["quizzes_completed"], 2)

    def test_admin_dashboard(self):
        client = Client()
        client.login(username='adminuser', password='password')

        response = client.get(reverse("admin_dashboard"))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.context["stats"]["total_attempts"], 3)
