import logging

from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.db.models import Count
from django.http import Http404
from django.shortcuts import render, redirect
from django.urls import reverse_lazy
from django.views.generic.edit import DeleteView
from django.views.generic.list import ListView

from accounts.decorators import admin_required, AdminRequiredMixin
from quiz.attempt import AttemptError, IncompleteAnswersError, InvalidTransition, SubmissionError
from quiz.forms import AnswerForm, QuizForm
from quiz.loader import EmptyQuizError, QuizLoadError, QuizNotFound, load_quiz
from quiz.models import Quiz, QuizAttempt
from quiz.results import build_review, score_percentage
from quiz.services import (attempt_writer, clear_machine, create_quiz_with_questions, restore_machine,
                           store_machine)

logger = logging.getLogger("edulearn")


class QuizListView(LoginRequiredMixin, ListView):
    model = Quiz
    paginate_by = 10
    template_name = 'quiz/index.html'
    context_object_name = 'quizzes'

    def get_queryset(self):
        return Quiz.objects.annotate(question_count=Count('questions')).order_by('-created_at')

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)

        attempts = {
            attempt.quiz_id: attempt
            for attempt in QuizAttempt.objects.filter(user=self.request.user,
                                                      quiz__in=list(context['quizzes']))
        }

        quiz_rows = []
        for quiz in context['quizzes']:
            attempt = attempts.get(quiz.pk)
            quiz_rows.append({
                'quiz': quiz,
                'attempt': attempt,
                'percentage': score_percentage(attempt.score, attempt.total_questions) if attempt else None,
            })

        context['quiz_rows'] = quiz_rows
        return context


def render_results(request, loaded):
    attempt = loaded.attempt

    context = {
        'quiz': loaded.quiz,
        'attempt': attempt,
        'percentage': score_percentage(attempt.score, attempt.total_questions),
        'review': build_review(loaded.questions, loaded.answers),
    }

    return render(request, 'quiz/quiz_results.html', context)


def render_question(request, loaded, machine):
    question = machine.current_question

    context = {
        'quiz': loaded.quiz,
        'question': question,
        'question_number': machine.current_index + 1,
        'total_questions': machine.total_questions,
        'progress': score_percentage(machine.current_index + 1, machine.total_questions),
        'selected_answer': machine.answers.get(question.pk),
        'answered_count': machine.answered_count,
        'is_first': machine.current_index == 0,
        'is_last': machine.is_last_question,
        'options': list(enumerate(question.options)),
    }

    return render(request, 'quiz/take_quiz.html', context)


@login_required(login_url='login')
def take_quiz(request, pk):

    try:
        loaded = load_quiz(pk, request.user)
    except QuizNotFound:
        raise Http404("Quiz not found")
    except EmptyQuizError as e:
        logger.error(e)
        return render(request, 'quiz/quiz_unavailable.html',
                      {'message': "This quiz has no questions yet."})
    except QuizLoadError as e:
        logger.error(e)
        return render(request, 'quiz/quiz_unavailable.html',
                      {'message': "This quiz could not be loaded. Please try again."}, status=503)

    if loaded.already_attempted:
        # A finished attempt is final; nothing posted here can change it
        clear_machine(request.session, loaded.quiz)
        if request.method == 'POST':
            messages.info(request, "You have already completed this quiz.")
            return redirect('take_quiz', pk=loaded.quiz.pk)
        return render_results(request, loaded)

    machine = restore_machine(request.session, loaded.quiz, loaded.questions)

    if request.method != 'POST':
        store_machine(request.session, loaded.quiz, machine)
        return render_question(request, loaded, machine)

    form = AnswerForm(request.POST)

    if not form.is_valid():
        logger.error(form.errors)
        messages.error(request, "That action was not understood.")
        return redirect('take_quiz', pk=loaded.quiz.pk)

    action = form.cleaned_data['action']
    option = form.cleaned_data.get('option')
    question_id = form.cleaned_data.get('question_id')
    if question_id is None:
        question_id = machine.current_question.pk

    try:
        if option is not None:
            machine.select_answer(question_id, option)

        if action == 'next':
            machine.advance()
        elif action == 'previous':
            machine.retreat()
        elif action == 'submit':
            machine.submit(attempt_writer(request.user, loaded.quiz))

    except IncompleteAnswersError as e:
        messages.error(request, f"Please answer all questions ({len(e.missing_question_ids)} remaining).")

    except SubmissionError as e:
        logger.error(f"Quiz {loaded.quiz.pk} submission failed for user {request.user.pk}: {e.__cause__}")
        messages.error(request, "Error submitting quiz. Your answers are kept, please try again.")

    except InvalidTransition as e:
        messages.warning(request, str(e))

    except AttemptError as e:
        logger.error(e)
        messages.error(request, str(e))

    if machine.result is not None:
        clear_machine(request.session, loaded.quiz)
        messages.success(request, "Quiz submitted successfully!")
    else:
        store_machine(request.session, loaded.quiz, machine)

    return redirect('take_quiz', pk=loaded.quiz.pk)


@admin_required
def create_quiz(request):

    if request.method == 'POST':
        form = QuizForm(request.POST)

        if form.is_valid():

            try:
                quiz = create_quiz_with_questions(title=form.cleaned_data['title'],
                                                  description=form.cleaned_data['description'],
                                                  content_ref=form.cleaned_data['content_ref'],
                                                  created_by=request.user,
                                                  questions=form.cleaned_data['questions'])
            except Exception as e:
                logger.error(e)
                messages.error(request, f"An error occurred: {str(e)}")
                return render(request, "quiz/create_quiz.html", {"form": form})

            logger.info(f"Quiz {quiz.pk} created by user {request.user.pk}")
            messages.success(request, "Quiz created successfully!")
            return redirect("quiz_index")

        else:
            logger.error(form.errors)
            return render(request, "quiz/create_quiz.html", {"form": form})

    form = QuizForm()
    return render(request, "quiz/create_quiz.html", {"form": form})


class QuizDeleteView(AdminRequiredMixin, DeleteView):
    model = Quiz
    success_url = reverse_lazy("quiz_index")
    template_name = "quiz/confirm_delete.html"
