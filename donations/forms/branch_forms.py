"""
Branch & Team Forms
===================

Forms for branch and team management
"""

from django import forms
from django.core.exceptions import ValidationError

from donations.models import Branch, Team


class BranchForm(forms.ModelForm):
    """
    Form for creating and updating branches
    """

    class Meta:
        model = Branch
        fields = ['name', 'code', 'address']

    def clean_code(self):
        """Validate branch code uniqueness"""
        code = (self.cleaned_data.get('code') or '').strip()

        queryset = Branch.objects.filter(code__iexact=code)
        if self.instance and self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)

        if queryset.exists():
            raise ValidationError("Kode cabang sudah digunakan.")

        return code


class TeamForm(forms.ModelForm):
    """
    Form for creating and updating teams
    """

    class Meta:
        model = Team
        fields = ['name', 'code', 'branch']

    def clean_code(self):
        """Validate team code uniqueness"""
        code = (self.cleaned_data.get('code') or '').strip()

        queryset = Team.objects.filter(code__iexact=code)
        if self.instance and self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)

        if queryset.exists():
            raise ValidationError("Kode tim sudah digunakan.")

        return code
