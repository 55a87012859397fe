"""
Program & Payment Method Forms
==============================
"""

from django import forms
from django.core.exceptions import ValidationError

from donations.models import Program, PaymentMethod


class ProgramForm(forms.ModelForm):
    """
    Donation program with its commission rates (percent, 0-100)
    """

    class Meta:
        model = Program
        fields = ['type', 'name', 'code', 'description', 'volunteer_rate', 'branch_rate']

    def clean_code(self):
        code = (self.cleaned_data.get('code') or '').strip()

        queryset = Program.objects.filter(code__iexact=code)
        if self.instance and self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)

        if queryset.exists():
            raise ValidationError("Kode program sudah digunakan.")

        return code

    def clean_type(self):
        """A program referenced by transactions keeps its type"""
        program_type = self.cleaned_data.get('type')
        instance = self.instance
        if (
            instance and instance.pk
            and program_type != instance.type
            and instance.transactions.exists()
        ):
            raise ValidationError("Jenis program tidak dapat diubah karena sudah memiliki transaksi.")
        return program_type


class PaymentMethodForm(forms.ModelForm):

    class Meta:
        model = PaymentMethod
        fields = ['name', 'description', 'is_active']

    def clean_name(self):
        name = (self.cleaned_data.get('name') or '').strip()

        queryset = PaymentMethod.objects.filter(name__iexact=name)
        if self.instance and self.instance.pk:
            queryset = queryset.exclude(pk=self.instance.pk)

        if queryset.exists():
            raise ValidationError("Metode pembayaran sudah ada.")

        return name
