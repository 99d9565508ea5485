from django.conf import settings
from django.contrib import messages
from django.contrib.auth import get_user_model
from django.shortcuts import render, redirect
from django.urls import reverse_lazy
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from django.views.generic import FormView
from django.views.generic.edit import CreateView

from accounts.forms import SignUpForm, ResendActivationEmailForm
from accounts.tasks import send_ses_email
from accounts.tokens import account_activation_token
from accounts.utils import build_activation_email

import logging

logger = logging.getLogger("edulearn")


User = get_user_model()


def send_activation_email(request, user):
    subject, body_text, body_html = build_activation_email(request, user)
    send_ses_email.delay_on_commit(to_email=[user.email],
                                  from_email=settings.DEFAULT_FROM_EMAIL,
                                  subject=subject,
                                  body_text=body_text,
                                  body_html=body_html)


class SignUpView(CreateView):
    form_class = SignUpForm
    success_url = reverse_lazy("login")
    template_name = "registration/signup.html"

    def form_valid(self, form):
        response = super().form_valid(form)

        user = self.object
        user.is_active = False  # Deactivate account until confirmed
        user.save()

        send_activation_email(self.request, user)
        logger.info(f"Signed up user {user.pk}, activation email queued")
        messages.success(self.request, "Check your email to activate your account.")

        return response


def activate_account(request, uidb64, token):
    try:
        uid = force_str(urlsafe_base64_decode(uidb64))
        user = User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None

    if user is not None and account_activation_token.check_token(user, token):
        user.is_active = True
        user.save()
        logger.info(f"Activated user {user.pk}")
        messages.success(request, "Your account is active. Please log in.")
        return redirect("login")
    else:
        logger.warning(f"Invalid activation link for uid {uidb64}")
        return render(request, "registration/account_activation_invalid.html")


class ResendActivationEmailView(FormView):
    template_name = 'registration/resend_activation.html'
    form_class = ResendActivationEmailForm
    success_url = reverse_lazy('login')

    def form_valid(self, form):
        email = form.cleaned_data['email']
        try:
            user = User.objects.get(email__iexact=email)
        except User.DoesNotExist:
            messages.error(self.request, 'No account found with that email address.')
        except User.MultipleObjectsReturned:
            logger.warning(f"Resend activation requested for shared email {email}")
            messages.error(self.request, 'That email address belongs to more than one account. Please contact support.')
        else:
            if not user.is_active:
                send_activation_email(self.request, user)
                messages.success(self.request, 'A new activation link has been sent to your email.')
            else:
                messages.info(self.request, 'This account is already active.')

        return super().form_valid(form)
