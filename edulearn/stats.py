from django.contrib.auth.models import User
from django.db.models import Count, Sum

from accounts.models import Role
from courses.models import Course, Progress, ProgressStatus
from edulearn.content import ContentKind
from library.models import Book
from quiz.models import Quiz, QuizAttempt
from quiz.results import score_percentage
from videos.models import Video


def whole_percentage(part, total):
    return score_percentage(part, total) if total else 0


def get_admin_stats():
    # Staff and users with an admin profile are not students
    students = (
        User.objects.filter(is_staff=False, is_superuser=False)
        .exclude(profile__role=Role.ADMIN)
    )

    quiz_performance = []
    for quiz in Quiz.objects.annotate(
            attempt_count=Count('attempts'),
            score_total=Sum('attempts__score'),
            question_total=Sum('attempts__total_questions')).order_by('-attempt_count', 'title'):
        average_percentage = None
        if quiz.attempt_count:
            average_percentage = whole_percentage(quiz.score_total or 0, quiz.question_total or 0)
        quiz_performance.append({
            'quiz': quiz,
            'attempt_count': quiz.attempt_count,
            'average_percentage': average_percentage,
        })

    return {
        'total_books': Book.objects.count(),
        'total_videos': Video.objects.count(),
        'total_courses': Course.objects.count(),
        'total_students': students.count(),
        'total_quizzes': Quiz.objects.count(),
        'total_attempts': QuizAttempt.objects.count(),
        'quiz_performance': quiz_performance,
    }


def get_student_stats(user):
    course_ids = list(Course.objects.values_list('pk', flat=True))
    completed_courses = Progress.objects.filter(user=user,
                                                content_type=ContentKind.COURSE,
                                                content_id__in=course_ids,
                                                status=ProgressStatus.COMPLETED).count()

    attempt_totals = list(QuizAttempt.objects.filter(user=user).values_list('score', 'total_questions'))
    total_score = sum(score for score, total in attempt_totals)
    total_questions = sum(total for score, total in attempt_totals)

    return {
        'total_courses': len(course_ids),
        'completed_courses': completed_courses,
        'progress_percentage': whole_percentage(completed_courses, len(course_ids)),
        'total_books': Book.objects.count(),
        'total_videos': Video.objects.count(),
        'quizzes_completed': len(attempt_totals),
        'quizzes_available': Quiz.objects.count(),
        'average_quiz_percentage': whole_percentage(total_score, total_questions),
    }
