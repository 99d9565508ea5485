from django.urls import path

from courses import views

urlpatterns = [
    path("", views.CourseListView.as_view(), name="course_index"),
    path("<int:pk>", views.CourseDetailView.as_view(), name="course_detail"),
    path("create", views.create_course, name="create_course"),
    path("<int:pk>/content", views.add_course_content, name="add_course_content"),
    path("<int:pk>/complete", views.complete_course, name="complete_course"),
]
