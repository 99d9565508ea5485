from django.contrib import admin
from django.db.models import Count

from library.models import Book


class BookAdmin(admin.ModelAdmin):
    list_display = ('title', 'author', 'subject', 'uploaded_by')
    list_filter = ('subject', 'uploaded_by')
    search_fields = ('title', 'author', 'uploaded_by__username')

    change_list_template = "admin/book_changelist.html"

    def changelist_view(self, request, extra_context=None):
        total_books = Book.objects.count()
        books_per_uploader = (
                Book.objects.values('uploaded_by__username')
            .annotate(count=Count('id'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_books'] = total_books
        extra_context['books_per_uploader'] = books_per_uploader

        return super().changelist_view(request, extra_context=extra_context)


admin.site.register(Book, BookAdmin)
