from django.contrib import admin
from django.db.models import Count

from accounts.models import Profile


class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'full_name', 'role')
    list_filter = ('role',)
    search_fields = ('full_name', 'user__username', 'user__email')

    change_list_template = "admin/profile_changelist.html"

    def changelist_view(self, request, extra_context=None):
        profiles_per_role = (
            Profile.objects.values('role')
            .annotate(count=Count('id'))
            .order_by('-count')
        )

        extra_context = extra_context or {}
        extra_context['total_profiles'] = Profile.objects.count()
        extra_context['profiles_per_role'] = profiles_per_role

        return super().changelist_view(request, extra_context=extra_context)


admin.site.register(Profile, ProfileAdmin)
