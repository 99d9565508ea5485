from django.urls import path

from quiz import views

urlpatterns = [
    path("", views.QuizListView.as_view(), name="quiz_index"),
    path('quiz/<int:pk>', views.take_quiz, name='take_quiz'),
    path('create', views.create_quiz, name='create_quiz'),
    path('delete/<int:pk>', views.QuizDeleteView.as_view(), name='delete_quiz'),
]
