from django.contrib.auth.decorators import login_required
from django.shortcuts import redirect, render
from django.views.generic.base import TemplateView

from accounts.decorators import admin_required, is_portal_admin
from edulearn.stats import get_admin_stats, get_student_stats


class HomePageView(TemplateView):
    template_name = 'homepage.html'

    def get(self, request, *args, **kwargs):
        # Signed in users land on the dashboard for their role
        if request.user.is_authenticated:
            if is_portal_admin(request.user):
                return redirect("admin_dashboard")
            return redirect("student_dashboard")
        return super().get(request, *args, **kwargs)


@login_required(login_url='login')
def student_dashboard(request):
    return render(request, 'dashboard/student_dashboard.html', {'stats': get_student_stats(request.user)})


@admin_required
def admin_dashboard(request):
    return render(request, 'dashboard/admin_dashboard.html', {'stats': get_admin_stats()})
