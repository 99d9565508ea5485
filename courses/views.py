import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db import transaction
from django.shortcuts import get_object_or_404, redirect, render
from django.utils import timezone
from django.views.decorators.http import require_POST
from django.views.generic.detail import DetailView
from django.views.generic.list import ListView

from accounts.decorators import admin_required
from courses.forms import CourseForm, CourseContentForm
from courses.models import Course, Progress, ProgressStatus
from edulearn.content import ContentKind, resolve_content
from quiz.models import Quiz

logger = logging.getLogger("edulearn")


class CourseListView(LoginRequiredMixin, ListView):
    model = Course
    paginate_by = 12
    template_name = 'courses/course_index.html'
    context_object_name = 'courses'

    def get_queryset(self):
        return Course.objects.order_by('-created_at')


class CourseDetailView(LoginRequiredMixin, DetailView):
    model = Course
    template_name = "courses/course_detail.html"
    context_object_name = "course"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)

        items = []
        for content in self.object.contents.order_by('order_index', 'created_at'):
            # Items whose row has since been deleted are skipped
            resolved = resolve_content(content.content_ref)
            if resolved is not None:
                items.append({"kind": content.content_type, "object": resolved})

        context["items"] = items
        context["quizzes"] = Quiz.objects.filter(content_type=ContentKind.COURSE, content_id=self.object.pk)
        context["progress"] = Progress.objects.filter(
            user=self.request.user, content_type=ContentKind.COURSE, content_id=self.object.pk).first()
        context["content_form"] = CourseContentForm(course=self.object)
        return context


@admin_required
def create_course(request):

    if request.method == "POST":
        form = CourseForm(request.POST, request.FILES)

        if form.is_valid():
            course = form.save(commit=False)
            course.created_by = request.user

            try:
                with transaction.atomic():
                    course.save()
            except Exception as e:
                logger.error(e)
                messages.error(request, f"An error occurred: {str(e)}")
                return render(request, "courses/create_course.html", {"form": form})

            messages.success(request, "Course created successfully")
            return redirect("course_detail", pk=course.pk)

        else:
            logger.error(form.errors)
            return render(request, "courses/create_course.html", {"form": form})

    form = CourseForm()
    return render(request, "courses/create_course.html", {"form": form})


@admin_required
def add_course_content(request, pk):
    course = get_object_or_404(Course, pk=pk)

    if request.method == "POST":
        form = CourseContentForm(request.POST, course=course)

        if form.is_valid():
            content = form.save(commit=False)
            content.course = course

            try:
                with transaction.atomic():
                    content.save()
            except Exception as e:
                logger.error(e)
                messages.error(request, f"An error occurred: {str(e)}")
                return render(request, "courses/add_course_content.html", {"form": form, "course": course})

            messages.success(request, "Content added to course")
            return redirect("course_detail", pk=course.pk)

        else:
            logger.error(form.errors)
            return render(request, "courses/add_course_content.html", {"form": form, "course": course})

    form = CourseContentForm(course=course)
    return render(request, "courses/add_course_content.html", {"form": form, "course": course})


@login_required(login_url='login')
@require_POST
def complete_course(request, pk):
    course = get_object_or_404(Course, pk=pk)

    progress, created = Progress.objects.update_or_create(
        user=request.user,
        content_type=ContentKind.COURSE,
        content_id=course.pk,
        defaults={
            "status": ProgressStatus.COMPLETED,
            "progress_percentage": 100,
            "completed_at": timezone.now(),
        },
    )

    logger.info(f"User {request.user.pk} completed course {course.pk}")
    messages.success(request, f"Marked {course.title} as completed")
    return redirect("course_detail", pk=course.pk)
