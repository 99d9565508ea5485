from django.contrib import admin
from django.db.models import Avg, Count

from quiz.models import Quiz, Question, QuizAttempt, QuizAnswer


class QuestionInline(admin.TabularInline):
    model = Question
    extra = 0
    ordering = ('question_number', 'created_at')


class QuizAdmin(admin.ModelAdmin):
    list_display = ('title', 'content_type', 'content_id', 'created_by')
    list_filter = ('content_type', 'created_by')
    search_fields = ('title', 'created_by__username')
    inlines = [QuestionInline]

    change_list_template = "admin/quiz_changelist.html"

    def changelist_view(self, request, extra_context=None):
        total_quizzes = Quiz.objects.count()
        quizzes_per_content_type = (
            Quiz.objects.values('content_type')
            .annotate(count=Count('id'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_quizzes'] = total_quizzes
        extra_context['quizzes_per_content_type'] = quizzes_per_content_type

        return super().changelist_view(request, extra_context=extra_context)


class QuizAnswerInline(admin.TabularInline):
    model = QuizAnswer
    extra = 0
    readonly_fields = ('question', 'selected_answer', 'is_correct')
    can_delete = False


class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ('quiz', 'user', 'score', 'total_questions', 'completed_at')
    list_filter = ('quiz',)
    search_fields = ('quiz__title', 'user__username')
    readonly_fields = ('quiz', 'user', 'score', 'total_questions', 'completed_at')
    inlines = [QuizAnswerInline]

    change_list_template = "admin/quizattempt_changelist.html"

    def changelist_view(self, request, extra_context=None):
        attempts_per_quiz = (
            QuizAttempt.objects.values('quiz__title')
            .annotate(count=Count('id'), average_score=Avg('score'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_attempts'] = QuizAttempt.objects.count()
        extra_context['attempts_per_quiz'] = attempts_per_quiz

        return super().changelist_view(request, extra_context=extra_context)


admin.site.register(Quiz, QuizAdmin)
admin.site.register(QuizAttempt, QuizAttemptAdmin)
