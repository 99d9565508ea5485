from accounts.decorators import get_user_role, Role


def user_role(request):
    role = get_user_role(request.user) if hasattr(request, "user") else None
    return {"user_role": role, "is_portal_admin": role == Role.ADMIN}
