import os
import shutil
import tempfile

from django.test import TestCase, SimpleTestCase, Client, override_settings
from django.core.files.uploadedfile import SimpleUploadedFile
from django.contrib.auth.models import User
from django.urls import reverse

from accounts.models import Profile, Role
from library.forms import BookForm
from library.models import Book
from library.utils import parse_tags
from quiz.models import Quiz

TEST_MEDIA_ROOT = tempfile.mkdtemp(prefix="edulearn-library-tests-")

pdf_content = (b'%PDF-1.4\n1 0 obj\n<</Type/Catalog/Pages 2 0 R>>\nendobj\n2 0 '
               b'obj\n<</Type/Pages/Kids[3 0 R]/Count 1>>\nendobj\n3 0 obj\n'
               b'<</Type/Page/MediaBox[0 0 595 842]/Parent 2 0 R/Resources<<>>>>\nendobj\nxref'
               b'\n0 4\n0000000000 65535 f\n0000000010 00000 n\n0000000053 00000 n\n0000000102 00000 n'
               b'\ntrailer\n<</Size 4/Root 1 0 R>>\nstartxref\n178\n%%EOF')


def make_pdf(name='test_document.pdf'):
    return SimpleUploadedFile(name=name, content=pdf_content, content_type='application/pdf')


class ParseTagsTestCase(SimpleTestCase):

    def test_parse_tags(self):
        self.assertEqual(parse_tags("Algebra, beginner , ,algebra,Geometry"), ["algebra", "beginner", "geometry"])
        self.assertEqual(parse_tags(""), [])
        self.assertEqual(parse_tags(None), [])


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class LibraryTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.test_user = User.objects.create_user(username='testuser', password='password')
        cls.admin_user = User.objects.create_user(username='adminuser', password='password')
        Profile.objects.create(user=cls.admin_user, role=Role.ADMIN)

        cls.book_1 = Book.objects.create(title="Linear Algebra", author="G. Strang", subject="Maths",
                                         tags=["algebra"], upload_file=make_pdf(), uploaded_by=cls.admin_user)
        cls.book_2 = Book.objects.create(title="Organic Chemistry", author="J. Clayden", subject="Chemistry",
                                         upload_file=make_pdf('chemistry.pdf'), uploaded_by=cls.admin_user)

    @classmethod
    def tearDownClass(cls):
        super().tearDownClass()
        shutil.rmtree(TEST_MEDIA_ROOT, ignore_errors=True)

    def setUp(self):
        self.authenticated_client = Client()
        self.authenticated_client.login(username='testuser', password='password')
        self.admin_client = Client()
        self.admin_client.login(username='adminuser', password='password')
        self.unauthenticated_client = Client()

    def test_book_index_requires_login(self):
        response = self.unauthenticated_client.get(reverse("book_index"))

        self.assertEqual(response.status_code, 302)

    def test_book_index(self):
        response = self.authenticated_client.get(reverse("book_index"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "library/book_index.html")
        self.assertEqual(len(response.context["books"]), 2)

    def test_book_index_subject_filter(self):
        response = self.authenticated_client.get(reverse("book_index"), {"subject": "maths"})

        self.assertEqual(list(response.context["books"]), [self.book_1])

    def test_book_detail_lists_quizzes(self):
        quiz = Quiz.objects.create(title="Vectors", content_type="book", content_id=self.book_1.pk)
        Quiz.objects.create(title="Reactions", content_type="book", content_id=self.book_2.pk)

        response = self.authenticated_client.get(reverse("book_detail", kwargs={"pk": self.book_1.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "library/book_detail.html")
        self.assertEqual(list(response.context["quizzes"]), [quiz])

    def test_download_book(self):
        response = self.authenticated_client.get(reverse("download_book", kwargs={"pk": self.book_1.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment", response["Content-Disposition"])
        self.assertEqual(b"".join(response.streaming_content), pdf_content)

    def test_download_missing_book(self):
        response = self.authenticated_client.get(reverse("download_book", kwargs={"pk": 9999}))

        self.assertEqual(response.status_code, 404)

    def test_upload_book_as_admin(self):
        response = self.admin_client.post(reverse("upload_book"), {
            "title": "Calculus",
            "author": "M. Spivak",
            "subject": "Maths",
            "description": "Limits and derivatives",
            "tag_list": "calculus, Limits",
            "upload_file": make_pdf('calculus.pdf'),
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("book_index"))

        book = Book.objects.get(title="Calculus")
        self.assertEqual(book.uploaded_by, self.admin_user)
        self.assertEqual(book.tags, ["calculus", "limits"])
        self.assertTrue(os.path.exists(os.path.join(TEST_MEDIA_ROOT, book.upload_file.name)))

    def test_upload_book_forbidden_for_student(self):
        response = self.authenticated_client.post(reverse("upload_book"), {
            "title": "Calculus",
            "upload_file": make_pdf('calculus.pdf'),
        })

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Book.objects.filter(title="Calculus").exists())

    def test_upload_book_wrong_extension(self):
        form = BookForm({"title": "Notes"}, {
            "upload_file": SimpleUploadedFile("notes.txt", b"plain text", content_type="text/plain"),
        })

        self.assertFalse(form.is_valid())
        self.assertIn("upload_file", form.errors)

    def test_delete_book_as_admin(self):
        book = Book.objects.create(title="Temporary", upload_file=make_pdf('temporary.pdf'))
        file_path = os.path.join(TEST_MEDIA_ROOT, book.upload_file.name)
        self.assertTrue(os.path.exists(file_path))

        response = self.admin_client.post(reverse("delete_book", kwargs={"pk": book.pk}))

        self.assertEqual(response.status_code, 302)
        self.assertFalse(Book.objects.filter(pk=book.pk).exists())
        self.assertFalse(os.path.exists(file_path))

    def test_delete_book_forbidden_for_student(self):
        response = self.authenticated_client.post(reverse("delete_book", kwargs={"pk": self.book_2.pk}))

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Book.objects.filter(pk=self.book_2.pk).exists())
