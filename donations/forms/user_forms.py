"""
User Forms
==========

User management, login and profile forms
"""

from django import forms
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError

from donations.models import User


class UserForm(forms.ModelForm):
    """
    Create/update a user account

    Password is required on create and optional on update.
    """

    password = forms.CharField(required=False, strip=False)

    class Meta:
        model = User
        fields = ['name', 'email', 'phone', 'role', 'branch', 'team']

    def clean_email(self):
        email = (self.cleaned_data.get('email') or '').strip().lower()

        queryset = User.objects.filter(email__iexact=email)
        if self.instance and self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)

        if queryset.exists():
            raise ValidationError("Email sudah terdaftar.")

        return email

    def clean_password(self):
        password = self.cleaned_data.get('password')
        creating = not (self.instance and self.instance.pk)

        if not password:
            if creating:
                raise ValidationError("Password wajib diisi.")
            return password

        validate_password(password, self.instance)
        return password

    def save(self, commit=True):
        user = super().save(commit=False)
        password = self.cleaned_data.get('password')
        if password:
            user.set_password(password)
        elif not user.pk:
            user.set_unusable_password()
        if commit:
            user.save()
        return user


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class ProfileForm(forms.ModelForm):
    """Self-service profile update"""

    password = forms.CharField(required=False, strip=False)
    current_password = forms.CharField(required=False, strip=False)

    class Meta:
        model = User
        fields = ['name', 'phone']

    def clean(self):
        cleaned_data = super().clean()
        password = cleaned_data.get('password')
        if password:
            if not self.instance.check_password(cleaned_data.get('current_password') or ''):
                self.add_error('current_password', "Password saat ini salah.")
            else:
                try:
                    validate_password(password, self.instance)
                except ValidationError as exc:
                    self.add_error('password', exc)
        return cleaned_data

    def save(self, commit=True):
        user = super().save(commit=False)
        password = self.cleaned_data.get('password')
        if password:
            user.set_password(password)
        if commit:
            user.save()
        return user
