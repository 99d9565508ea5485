from django.shortcuts import render, redirect
from django.views.generic.list import ListView
from django.contrib.auth.mixins import LoginRequiredMixin
from django.views.generic.detail import DetailView
from django.db import transaction
from django.views.generic.edit import DeleteView
from django.urls import reverse_lazy

import logging

from accounts.decorators import admin_required, AdminRequiredMixin
from edulearn.content import ContentKind
from quiz.models import Quiz
from videos.forms import VideoForm
from videos.tasks import delete_s3_file, upload_video_to_s3
from videos.utils import get_s3_client, presign_video

from django.contrib import messages

from videos.models import Video

logger = logging.getLogger("edulearn")


class VideoListView(LoginRequiredMixin, ListView):
    model = Video
    paginate_by = 12
    template_name = 'videos/video_index.html'
    context_object_name = 'videos'

    def get_queryset(self):
        return Video.objects.order_by('-created_at')


class VideoDetailView(LoginRequiredMixin, DetailView):
    model = Video
    template_name = "videos/video_detail.html"
    context_object_name = "video"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["video_url"] = None
        context["video_url_error"] = None
        context["quizzes"] = Quiz.objects.filter(content_type=ContentKind.VIDEO, content_id=self.object.pk)

        video = self.object

        if video.video_url:
            context["video_url"] = video.video_url

        elif video.status == "completed" and video.s3_key:

            s3 = get_s3_client()
            if s3:
                try:
                    context["video_url"] = presign_video(s3, video.s3_key)
                except Exception as e:
                    logger.error(f"Error generating S3 URL: {e}")
                    context["video_url_error"] = "Could not load video."
            else:
                context["video_url_error"] = "Could not load video."

        return context


@admin_required
def upload_video(request):
    form = None

    if request.method == "POST":

        form = VideoForm(request.POST, request.FILES)

        if form.is_valid():
            video = form.save(commit=False)  # Don't save yet
            video.uploaded_by = request.user
            video.celery_task_id = None
            # Externally hosted videos are playable straight away
            video.status = "completed" if video.video_url else "uploaded"

            try:
                with transaction.atomic():
                    video.save()
            except Exception as e:
                logger.error(e)
                messages.error(request, f"An error occurred: {str(e)}")
                return render(request, "videos/upload_video.html", {"form": form})

            if video.upload_file:
                upload_video_to_s3.delay_on_commit(video_id=video.pk)

            messages.success(request, "Video uploaded successfully")
            return redirect("video_index")

        else:
            logger.error(form.errors)
            return render(request, "videos/upload_video.html", {"form": form})

    else:
        form = VideoForm()

        return render(request, "videos/upload_video.html", {"form": form})


class VideoDeleteView(AdminRequiredMixin, DeleteView):
    model = Video
    success_url = reverse_lazy("video_index")
    template_name = "videos/confirm_vid_delete.html"

    def form_valid(self, form):

        instance = self.get_object()

        if instance.s3_key:
            delete_s3_file.delay_on_commit(s3_key=instance.s3_key)

        for field_file in (instance.upload_file, instance.thumbnail):
            if field_file:
                field_file.delete(save=False)

        return super().form_valid(form)
