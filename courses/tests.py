from django.test import TestCase, Client
from django.contrib.auth.models import User
from django.urls import reverse

from accounts.models import Profile, Role
from courses.forms import CourseContentForm
from courses.models import Course, CourseContent, Progress, ProgressStatus
from edulearn.content import BookRef
from library.models import Book
from quiz.models import Quiz
from videos.models import Video


class CourseTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.test_user = User.objects.create_user(username='testuser', password='password')
        cls.admin_user = User.objects.create_user(username='adminuser', password='password')
        Profile.objects.create(user=cls.admin_user, role=Role.ADMIN)

        cls.course = Course.objects.create(title="Intro to Biology", subject="Biology", created_by=cls.admin_user)
        cls.other_course = Course.objects.create(title="Intro to Physics", subject="Physics")

        cls.book = Book.objects.create(title="Campbell Biology", upload_file="books/campbell.pdf")
        cls.video = Video.objects.create(title="The cell", status="completed",
                                         video_url="https://videos.example.com/cell.mp4")

        CourseContent.objects.create(course=cls.course, content_type="video", content_id=cls.video.pk,
                                     order_index=2)
        CourseContent.objects.create(course=cls.course, content_type="book", content_id=cls.book.pk,
                                     order_index=1)

    def setUp(self):
        self.authenticated_client = Client()
        self.authenticated_client.login(username='testuser', password='password')
        self.admin_client = Client()
        self.admin_client.login(username='adminuser', password='password')

    def test_course_index(self):
        response = self.authenticated_client.get(reverse("course_index"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "courses/course_index.html")
        self.assertEqual(len(response.context["courses"]), 2)

    def test_course_detail_items_in_order(self):
        quiz = Quiz.objects.create(title="Cells", content_type="course", content_id=self.course.pk)

        response = self.authenticated_client.get(reverse("course_detail", kwargs={"pk": self.course.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["object"] for item in response.context["items"]], [self.book, self.video])
        self.assertEqual(list(response.context["quizzes"]), [quiz])
        self.assertIsNone(response.context["progress"])

    def test_course_detail_skips_deleted_content(self):
        book = Book.objects.create(title="Gone soon", upload_file="books/gone.pdf")
        CourseContent.objects.create(course=self.course, content_type="book", content_id=book.pk, order_index=3)
        book.delete()

        response = self.authenticated_client.get(reverse("course_detail", kwargs={"pk": self.course.pk}))

        self.assertEqual(len(response.context["items"]), 2)

    def test_content_ref(self):
        content = self.course.contents.get(content_type="book")

        self.assertEqual(content.content_ref, BookRef(content_id=self.book.pk))

    def test_complete_course(self):
        response = self.authenticated_client.post(reverse("complete_course", kwargs={"pk": self.course.pk}))

        self.assertRedirects(response, reverse("course_detail", kwargs={"pk": self.course.pk}))

        progress = Progress.objects.get(user=self.test_user, content_type="course", content_id=self.course.pk)
        self.assertEqual(progress.status, ProgressStatus.COMPLETED)
        self.assertEqual(progress.progress_percentage, 100)
        self.assertIsNotNone(progress.completed_at)

        # Completing twice keeps a single row
        self.authenticated_client.post(reverse("complete_course", kwargs={"pk": self.course.pk}))
        self.assertEqual(Progress.objects.filter(user=self.test_user).count(), 1)

    def test_complete_course_requires_post(self):
        response = self.authenticated_client.get(reverse("complete_course", kwargs={"pk": self.course.pk}))

        self.assertEqual(response.status_code, 405)

    def test_create_course_as_admin(self):
        response = self.admin_client.post(reverse("create_course"), {
            "title": "Intro to Chemistry",
            "subject": "Chemistry",
            "description": "Atoms and bonds",
        })

        course = Course.objects.get(title="Intro to Chemistry")
        self.assertRedirects(response, reverse("course_detail", kwargs={"pk": course.pk}))
        self.assertEqual(course.created_by, self.admin_user)

    def test_create_course_forbidden_for_student(self):
        response = self.authenticated_client.post(reverse("create_course"), {"title": "Nope"})

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Course.objects.filter(title="Nope").exists())

    def test_add_course_content_as_admin(self):
        response = self.admin_client.post(reverse("add_course_content", kwargs={"pk": self.other_course.pk}), {
            "content_type": "book",
            "content_id": self.book.pk,
            "order_index": 0,
        })

        self.assertRedirects(response, reverse("course_detail", kwargs={"pk": self.other_course.pk}))
        self.assertTrue(CourseContent.objects.filter(course=self.other_course, content_type="book",
                                                     content_id=self.book.pk).exists())

    def test_course_content_form_validation(self):
        missing = CourseContentForm({"content_type": "video", "content_id": 987654, "order_index": 0},
                                    course=self.course)
        self.assertFalse(missing.is_valid())

        itself = CourseContentForm({"content_type": "course", "content_id": self.course.pk, "order_index": 0},
                                   course=self.course)
        self.assertFalse(itself.is_valid())
        self.assertIn("A course cannot contain itself.", itself.non_field_errors())

        duplicate = CourseContentForm({"content_type": "book", "content_id": self.book.pk, "order_index": 0},
                                      course=self.course)
        self.assertFalse(duplicate.is_valid())
        self.assertIn("This item is already part of the course.", duplicate.non_field_errors())
