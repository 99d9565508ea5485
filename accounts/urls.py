from django.urls import path
from django.contrib.auth.views import LoginView, LogoutView

from accounts.forms import CustomAuthenticationForm
from accounts.views import SignUpView, activate_account, ResendActivationEmailView

urlpatterns = [
    path("signup/", SignUpView.as_view(), name="signup"),
    path("activate/<uidb64>/<token>/", activate_account, name="activate"),
    path("login/", LoginView.as_view(
            authentication_form=CustomAuthenticationForm,
            template_name="registration/login.html"
        ), name="login"),
    path("logout/", LogoutView.as_view(), name="logout"),
    path("resend_activation", ResendActivationEmailView.as_view(), name="resend_activation")
]
