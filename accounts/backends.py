from django.contrib.auth import get_user_model
from django.contrib.auth.backends import ModelBackend

User = get_user_model()


class EmailOrUsernameBackend(ModelBackend):
    """
    Sign in with either the username or the email address.

    Inactive users are still returned when the password matches so that the
    login form can tell them their account is not active yet. ``get_user``
    keeps rejecting them, so an inactive user never holds a session.
    """

    def authenticate(self, request, username=None, password=None, **kwargs):
        if username is None:
            username = kwargs.get(User.USERNAME_FIELD)

        if username is None or password is None:
            return None

        user = self.find_user(username)

        if user is None:
            # Hash anyway so unknown logins take as long as known ones
            User().set_password(password)
            return None

        if user.check_password(password):
            return user

        return None

    def find_user(self, login):
        user = User.objects.filter(username=login).first()
        if user is not None:
            return user

        matches = list(User.objects.filter(email__iexact=login)[:2])

        # An email shared by two accounts cannot pick one
        return matches[0] if len(matches) == 1 else None
