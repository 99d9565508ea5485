from django.contrib.sites.shortcuts import get_current_site
from django.template.loader import render_to_string
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from accounts.tokens import account_activation_token
from edulearn.aws import get_aws_client


def get_ses_client():
    return get_aws_client("ses")


def build_activation_email(request, user):
    """Return ``(subject, body_text, body_html)`` for an account activation email."""
    context = {
        "user": user,
        "domain": get_current_site(request).domain,
        "uid": urlsafe_base64_encode(force_bytes(user.pk)),
        "token": account_activation_token.make_token(user),
    }
    subject = "Activate Your Account"
    body_text = render_to_string("registration/account_activation_email.txt", context)
    body_html = render_to_string("registration/account_activation_email.html", context)
    return subject, body_text, body_html
