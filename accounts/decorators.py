from functools import wraps

from django.contrib.auth.mixins import LoginRequiredMixin
from django.http import HttpResponseForbidden
from django.shortcuts import redirect

from accounts.models import Profile, Role

import logging

logger = logging.getLogger("edulearn")


def get_user_role(user):
    if not user.is_authenticated:
        return None

    if user.is_superuser or user.is_staff:
        return Role.ADMIN

    profile, created = Profile.objects.get_or_create(user=user)

    if created:
        logger.debug(f"Created {profile.role} profile for user {user.pk}")

    return profile.role


def is_portal_admin(user):
    return get_user_role(user) == Role.ADMIN


def admin_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return redirect("login")

        if not is_portal_admin(request.user):
            logger.warning(f"User {request.user.pk} tried to reach admin view {view_func.__name__}")
            return HttpResponseForbidden("Only administrators can do this.")

        return view_func(request, *args, **kwargs)
    return wrapper


class AdminRequiredMixin(LoginRequiredMixin):

    def dispatch(self, request, *args, **kwargs):
        if request.user.is_authenticated and not is_portal_admin(request.user):
            logger.warning(f"User {request.user.pk} tried to reach admin view {self.__class__.__name__}")
            return HttpResponseForbidden("Only administrators can do this.")
        return super().dispatch(request, *args, **kwargs)
