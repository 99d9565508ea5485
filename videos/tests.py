import os
import shutil
import tempfile

from django.test import TestCase, Client, override_settings
from django.contrib.auth.models import User
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.conf import settings
from django.urls import reverse

from unittest.mock import patch, MagicMock

from botocore.exceptions import ClientError

from accounts.models import Profile, Role
from quiz.models import Quiz
from videos.forms import VideoForm
from videos.models import Video
from videos.tasks import delete_s3_file, upload_video_to_s3
from videos.utils import get_s3_client
from videos.validators import validate_video_file_size

TEST_MEDIA_ROOT = tempfile.mkdtemp(prefix="edulearn-video-tests-")


class MockS3Client:

    presigned_url = "http://fakes3url.aws.com/videos/1.mp4"

    def __init__(self, raise_exception=False):
        self.raise_exception = raise_exception
        self.uploaded = []

    def generate_presigned_url(self, action, Params, ExpiresIn):
        if self.raise_exception:
            raise Exception("presign failed")
        return MockS3Client.presigned_url

    def upload_fileobj(self, file_obj, bucket, key):
        if self.raise_exception:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.uploaded.append((file_obj.read(), bucket, key))


def make_video_file(name="lecture.mp4", content=b"fake video bytes"):
    return SimpleUploadedFile(name=name, content=content, content_type="video/mp4")


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class VideoTestCase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.test_user = User.objects.create_user(username='testuser', password='password')
        cls.admin_user = User.objects.create_user(username='adminuser', password='password')
        Profile.objects.create(user=cls.admin_user, role=Role.ADMIN)

        cls.s3_video = Video.objects.create(title="Cell biology", subject="Biology", status="completed",
                                            s3_key="videos/1.mp4", uploaded_by=cls.admin_user)
        cls.url_video = Video.objects.create(title="Photosynthesis", subject="Biology", status="completed",
                                             video_url="https://videos.example.com/photosynthesis.mp4")
        cls.processing_video = Video.objects.create(title="Genetics", subject="Biology", status="processing",
                                                    celery_task_id="celery_task_id_3")

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

    def test_video_index_requires_login(self):
        response = self.unauthenticated_client.get(reverse("video_index"))

        self.assertEqual(response.status_code, 302)

    def test_video_index(self):
        response = self.authenticated_client.get(reverse("video_index"))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "videos/video_index.html")
        self.assertEqual(len(response.context["videos"]), 3)

    @patch("videos.views.get_s3_client")
    def test_video_detail_presigns_s3_video(self, mock_get_client):
        mock_get_client.return_value = MockS3Client()

        response = self.authenticated_client.get(reverse("video_detail", kwargs={"pk": self.s3_video.pk}))

        self.assertEqual(response.status_code, 200)
        self.assertTemplateUsed(response, "videos/video_detail.html")
        self.assertEqual(response.context["video_url"], MockS3Client.presigned_url)
        self.assertIsNone(response.context["video_url_error"])

    @patch("videos.views.get_s3_client")
    def test_video_detail_presign_error(self, mock_get_client):
        mock_get_client.return_value = MockS3Client(raise_exception=True)

        response = self.authenticated_client.get(reverse("video_detail", kwargs={"pk": self.s3_video.pk}))

        self.assertIsNone(response.context["video_url"])
        self.assertEqual(response.context["video_url_error"], "Could not load video.")
        self.assertContains(response, "Could not load video.")

    @patch("videos.views.get_s3_client", return_value=None)
    def test_video_detail_without_s3_client(self, mock_get_client):
        response = self.authenticated_client.get(reverse("video_detail", kwargs={"pk": self.s3_video.pk}))

        self.assertEqual(response.context["video_url_error"], "Could not load video.")

    @patch("videos.views.get_s3_client")
    def test_video_detail_external_url(self, mock_get_client):
        quiz = Quiz.objects.create(title="Light reactions", content_type="video", content_id=self.url_video.pk)

        response = self.authenticated_client.get(reverse("video_detail", kwargs={"pk": self.url_video.pk}))

        mock_get_client.assert_not_called()
        self.assertEqual(response.context["video_url"], self.url_video.video_url)
        self.assertEqual(list(response.context["quizzes"]), [quiz])

    @patch("videos.views.get_s3_client")
    def test_video_detail_still_processing(self, mock_get_client):
        response = self.authenticated_client.get(reverse("video_detail", kwargs={"pk": self.processing_video.pk}))

        mock_get_client.assert_not_called()
        self.assertIsNone(response.context["video_url"])
        self.assertIsNone(response.context["video_url_error"])

    @patch("videos.views.upload_video_to_s3.delay_on_commit")
    def test_upload_video_file_as_admin(self, upload_pch):
        response = self.admin_client.post(reverse("upload_video"), {
            "title": "Mitosis",
            "subject": "Biology",
            "description": "Cell division",
            "duration_minutes": 12,
            "upload_file": make_video_file(),
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(response.url, reverse("video_index"))

        video = Video.objects.get(title="Mitosis")
        self.assertEqual(video.status, "uploaded")
        self.assertEqual(video.uploaded_by, self.admin_user)
        upload_pch.assert_called_once_with(video_id=video.pk)

    @patch("videos.views.upload_video_to_s3.delay_on_commit")
    def test_upload_video_url_as_admin(self, upload_pch):
        response = self.admin_client.post(reverse("upload_video"), {
            "title": "Meiosis",
            "video_url": "https://videos.example.com/meiosis.mp4",
        })

        self.assertEqual(response.status_code, 302)
        self.assertEqual(Video.objects.get(title="Meiosis").status, "completed")
        upload_pch.assert_not_called()

    @patch("videos.views.upload_video_to_s3.delay_on_commit")
    def test_upload_video_forbidden_for_student(self, upload_pch):
        response = self.authenticated_client.post(reverse("upload_video"), {
            "title": "Meiosis",
            "video_url": "https://videos.example.com/meiosis.mp4",
        })

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Video.objects.filter(title="Meiosis").exists())
        upload_pch.assert_not_called()

    def test_video_form_needs_exactly_one_source(self):
        form = VideoForm({"title": "Nothing"})
        self.assertFalse(form.is_valid())
        self.assertIn("Provide either a video URL or a video file.", form.non_field_errors())

        form = VideoForm({"title": "Both", "video_url": "https://videos.example.com/a.mp4"},
                         {"upload_file": make_video_file()})
        self.assertFalse(form.is_valid())
        self.assertIn("Provide a video URL or a video file, not both.", form.non_field_errors())

    @override_settings(MAX_VIDEO_UPLOAD_MB=1)
    def test_video_file_size_validator(self):
        small = MagicMock(size=512 * 1024)
        large = MagicMock(size=2 * 1024 * 1024)

        validate_video_file_size(small)
        with self.assertRaises(ValidationError):
            validate_video_file_size(large)

    @patch("videos.views.delete_s3_file.delay_on_commit")
    def test_delete_video_as_admin(self, delete_pch):
        response = self.admin_client.post(reverse("delete_video", kwargs={"pk": self.s3_video.pk}))

        self.assertEqual(response.status_code, 302)
        self.assertFalse(Video.objects.filter(pk=self.s3_video.pk).exists())
        delete_pch.assert_called_once_with(s3_key="videos/1.mp4")

    @patch("videos.views.delete_s3_file.delay_on_commit")
    def test_delete_video_forbidden_for_student(self, delete_pch):
        response = self.authenticated_client.post(reverse("delete_video", kwargs={"pk": self.s3_video.pk}))

        self.assertEqual(response.status_code, 403)
        self.assertTrue(Video.objects.filter(pk=self.s3_video.pk).exists())
        delete_pch.assert_not_called()


@override_settings(MEDIA_ROOT=TEST_MEDIA_ROOT)
class VideoTaskTestCase(TestCase):

    def setUp(self):
        self.video = Video.objects.create(title="Mitosis", upload_file=make_video_file())
        self.staging_path = os.path.join(TEST_MEDIA_ROOT, self.video.upload_file.name)

    @patch("videos.tasks.get_s3_client")
    def test_upload_video_to_s3(self, mock_get_client):
        s3 = MockS3Client()
        mock_get_client.return_value = s3

        s3_key = upload_video_to_s3(video_id=self.video.pk)

        self.video.refresh_from_db()
        self.assertEqual(s3_key, f"videos/{self.video.pk}.mp4")
        self.assertEqual(self.video.status, "completed")
        self.assertEqual(self.video.s3_key, s3_key)
        self.assertEqual(s3.uploaded, [(b"fake video bytes", settings.S3_BUCKET_NAME, s3_key)])
        self.assertFalse(self.video.upload_file)
        self.assertFalse(os.path.exists(self.staging_path))

    @patch("videos.tasks.get_s3_client")
    def test_upload_video_to_s3_error(self, mock_get_client):
        mock_get_client.return_value = MockS3Client(raise_exception=True)

        with self.assertRaises(ClientError):
            upload_video_to_s3(video_id=self.video.pk)

        self.video.refresh_from_db()
        self.assertEqual(self.video.status, "error")
        self.assertEqual(self.video.s3_key, "")
        self.assertTrue(os.path.exists(self.staging_path))

    @patch("videos.tasks.get_s3_client")
    def test_upload_video_to_s3_missing_video(self, mock_get_client):
        self.assertIsNone(upload_video_to_s3(video_id=987654))
        mock_get_client.assert_not_called()

    @patch("videos.tasks.get_s3_client")
    def test_delete_s3_file(self, mock_get_client):
        s3 = MagicMock()
        mock_get_client.return_value = s3

        self.assertTrue(delete_s3_file(s3_key="videos/1.mp4"))
        s3.delete_object.assert_called_once_with(Bucket=settings.S3_BUCKET_NAME, Key="videos/1.mp4")

    @patch("videos.tasks.get_s3_client", return_value=None)
    def test_delete_s3_file_without_client(self, mock_get_client):
        with self.assertRaises(Exception):
            delete_s3_file(s3_key="videos/1.mp4")

    @patch('edulearn.aws.settings')
    @patch('edulearn.aws.boto3.client')
    def test_s3_client_production_uses_default_credentials(self, mock_boto_client, mock_settings):
        mock_settings.DJANGO_ENV = "PRODUCTION"
        mock_settings.AWS_REGION = "eu-west-2"
        mock_client_instance = MagicMock()
        mock_boto_client.return_value = mock_client_instance

        self.assertEqual(get_s3_client(), mock_client_instance)
        mock_boto_client.assert_called_once_with('s3', region_name="eu-west-2")

    @patch('edulearn.aws.settings')
    @patch('edulearn.aws.boto3.client', side_effect=Exception("S3 failure"))
    def test_s3_client_returns_none_on_exception(self, mock_boto_client, mock_settings):
        mock_settings.DJANGO_ENV = "DEVELOPMENT"
        mock_settings.AWS_REGION = "eu-west-2"
        mock_settings.AWS_ACCESS_KEY = "INVALID"
        mock_settings.AWS_SECRET_ACCESS_KEY = "INVALID"

        self.assertIsNone(get_s3_client())
