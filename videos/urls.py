from django.urls import path

from videos import views

urlpatterns = [
    path("", views.VideoListView.as_view(), name="video_index"),
    path("<int:pk>", views.VideoDetailView.as_view(), name="video_detail"),
    path("upload", views.upload_video, name="upload_video"),
    path("delete/<int:pk>", views.VideoDeleteView.as_view(), name="delete_video"),
]
