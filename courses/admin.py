from django.contrib import admin
from django.db.models import Count

from courses.models import Course, CourseContent, Progress


class CourseContentInline(admin.TabularInline):
    model = CourseContent
    extra = 0


class CourseAdmin(admin.ModelAdmin):
    list_display = ('title', 'subject', 'created_by', 'created_at')
    list_filter = ('subject',)
    search_fields = ('title', 'subject', 'created_by__username')
    inlines = [CourseContentInline]

    change_list_template = "admin/course_changelist.html"

    def changelist_view(self, request, extra_context=None):
        courses_per_subject = (
            Course.objects.values('subject')
            .annotate(count=Count('id'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_courses'] = Course.objects.count()
        extra_context['courses_per_subject'] = courses_per_subject

        return super().changelist_view(request, extra_context=extra_context)


class ProgressAdmin(admin.ModelAdmin):
    list_display = ('user', 'content_type', 'content_id', 'status', 'progress_percentage')
    list_filter = ('status', 'content_type')
    search_fields = ('user__username',)


admin.site.register(Course, CourseAdmin)
admin.site.register(Progress, ProgressAdmin)
