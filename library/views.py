import logging
import os

from django.contrib import messages
from django.db import transaction
from django.shortcuts import redirect, render, get_object_or_404
from django.contrib.auth.decorators import login_required
from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import Http404, FileResponse
from django.views.generic.list import ListView
from django.views.generic.edit import DeleteView
from django.views.generic.detail import DetailView
from django.urls import reverse_lazy

from accounts.decorators import admin_required, AdminRequiredMixin
from edulearn.content import ContentKind
from library.forms import BookForm
from library.models import Book
from quiz.models import Quiz


logger = logging.getLogger("edulearn")


class BookListView(LoginRequiredMixin, ListView):
    model = Book
    paginate_by = 12
    template_name = 'library/book_index.html'
    context_object_name = 'books'

    def get_queryset(self):
        queryset = Book.objects.order_by('-created_at')

        subject = self.request.GET.get("subject")
        if subject:
            queryset = queryset.filter(subject__iexact=subject)

        return queryset


class BookDetailView(LoginRequiredMixin, DetailView):
    model = Book
    template_name = "library/book_detail.html"
    context_object_name = "book"

    def get_context_data(self, **kwargs):
        context = super().get_context_data(**kwargs)
        context["quizzes"] = Quiz.objects.filter(content_type=ContentKind.BOOK, content_id=self.object.pk)
        return context


@admin_required
def upload_book(request):
    form = None

    if request.method == "POST":

        form = BookForm(request.POST, request.FILES)

        if form.is_valid():

            book = form.save(commit=False)  # Don't save yet
            book.uploaded_by = request.user

            try:
                with transaction.atomic():
                    book.save()
            except Exception as e:
                logger.error(e)
                messages.error(request, f"An error occurred: {str(e)}")
                return render(request, "library/upload_book.html", {"form": form})

            logger.info(f"Book {book.pk} uploaded by user {request.user.pk}")
            messages.success(request, "Book uploaded successfully")
            return redirect("book_index")

        else:
            logger.error(form.errors)
            return render(request, "library/upload_book.html", {"form": form})

    else:
        form = BookForm()

        return render(request, "library/upload_book.html", {"form": form})


@login_required(login_url='login')
def download_book(request, pk):
    book = get_object_or_404(Book, pk=pk)

    if not book.upload_file:
        raise Http404("File not found")

    try:
        file_handle = book.upload_file.open('rb')
    except FileNotFoundError:
        logger.error(f"File for book {book.pk} is missing from storage")
        raise Http404("File not found")

    filename = os.path.basename(book.upload_file.name)
    return FileResponse(file_handle, as_attachment=True, filename=filename)


class BookDeleteView(AdminRequiredMixin, DeleteView):
    model = Book
    success_url = reverse_lazy("book_index")
    template_name = "library/confirm_book_delete.html"

    def form_valid(self, form):
        instance = self.get_object()

        # Remove the stored files before the row goes
        for field_file in (instance.upload_file, instance.cover_image):
            if field_file:
                field_file.delete(save=False)

        messages.success(self.request, f"Deleted {instance.title}")
        return super().form_valid(form)
