from django.contrib import admin
from django.db.models import Count

from videos.models import Video


class VideoAdmin(admin.ModelAdmin):
    list_display = ('title', 'subject', 'status', 'source', 'uploaded_by', 'created_at')
    list_filter = ('status', 'subject')
    search_fields = ('title', 'subject', 'uploaded_by__username')
    readonly_fields = ('s3_key', 'celery_task_id', 'status')

    change_list_template = "admin/video_changelist.html"

    @admin.display(description="Source")
    def source(self, obj):
        if obj.video_url:
            return "External URL"
        return "S3" if obj.s3_key else "Pending upload"

    def changelist_view(self, request, extra_context=None):
        videos_per_status = (
            Video.objects.values('status')
            .annotate(count=Count('id'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_vids'] = Video.objects.count()
        extra_context['videos_per_status'] = videos_per_status

        return super().changelist_view(request, extra_context=extra_context)


admin.site.register(Video, VideoAdmin)
