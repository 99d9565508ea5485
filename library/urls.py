from django.urls import path

from library import views

urlpatterns = [
    path("", views.BookListView.as_view(), name="book_index"),
    path("<int:pk>", views.BookDetailView.as_view(), name="book_detail"),
    path("upload", views.upload_book, name="upload_book"),
    path("<int:pk>/download", views.download_book, name="download_book"),
    path("delete/<int:pk>", views.BookDeleteView.as_view(), name="delete_book"),
]
