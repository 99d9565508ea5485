from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

from edulearn import views

urlpatterns = [
    path("", views.HomePageView.as_view(), name="home"),
    path("student/", views.student_dashboard, name="student_dashboard"),
    path("admin-dashboard/", views.admin_dashboard, name="admin_dashboard"),
    path("accounts/", include("accounts.urls")),
    path("courses/", include("courses.urls")),
    path("books/", include("library.urls")),
    path("videos/", include("videos.urls")),
    path("quizzes/", include("quiz.urls")),
    path("admin/", admin.site.urls),
]

urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
