from django import forms
from django.contrib.auth.forms import AuthenticationForm, UserCreationForm
from django.contrib.auth.models import User
from django.db import transaction

from accounts.models import Profile, Role


class SignUpForm(UserCreationForm):
    full_name = forms.CharField(label="Full name", max_length=255, required=False)
    email = forms.EmailField(required=True, help_text="We send an activation link to this address.")

    class Meta(UserCreationForm.Meta):
        model = User
        fields = ("full_name", "username", "email")

    def clean_email(self):
        email = self.cleaned_data["email"].strip()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError("A user with that email already exists.")
        return email

    def save(self, commit=True):
        user = super().save(commit=False)
        user.email = self.cleaned_data["email"]

        if commit:
            with transaction.atomic():
                user.save()
                # Self-registered accounts are always students
                Profile.objects.create(user=user,
                                       full_name=self.cleaned_data.get("full_name", ""),
                                       role=Role.STUDENT)
        return user


class CustomAuthenticationForm(AuthenticationForm):
    username = forms.CharField(label="Username or email", max_length=254,
                               widget=forms.TextInput(attrs={"autofocus": True}))

    def confirm_login_allowed(self, user):
        if not user.is_active:
            raise forms.ValidationError(
                "Your account is inactive. Please contact support.",
                code='inactive',
            )


class ResendActivationEmailForm(forms.Form):
    email = forms.EmailField(label="Email address")
