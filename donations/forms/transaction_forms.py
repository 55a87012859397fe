"""
Transaction Forms
=================

Create/update payload validation, the validation action and bulk status
changes.
"""

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import FileExtensionValidator

from donations.models import Transaction, Program, User


TRANSACTION_DATE_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%dT%H:%M:%S',
    '%Y-%m-%dT%H:%M',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
    '%d/%m/%Y %H:%M:%S',
    '%d/%m/%Y',
]

PROOF_IMAGE_EXTENSIONS = ['jpeg', 'png', 'jpg', 'gif', 'webp']


class TransactionForm(forms.ModelForm):
    """
    Create/update a donation transaction

    Field requirements that depend on program_type are enforced by
    Transaction.clean(), which ModelForm runs after field cleaning.
    """

    transaction_date = forms.DateTimeField(input_formats=TRANSACTION_DATE_FORMATS)
    proof_image = forms.ImageField(
        required=False,
        validators=[FileExtensionValidator(PROOF_IMAGE_EXTENSIONS)]
    )

    class Meta:
        model = Transaction
        fields = [
            'branch', 'team', 'volunteer',
            'program_type', 'program', 'ziswaf_program',
            'donor_name', 'amount', 'qurban_amount', 'qurban_owner_name',
            'payment_method', 'transaction_date', 'proof_image',
        ]

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['volunteer'].queryset = User.objects.all()
        self.fields['ziswaf_program'].queryset = Program.objects.ziswaf()

    def clean_donor_name(self):
        donor_name = (self.cleaned_data.get('donor_name') or '').strip()
        if not donor_name:
            raise ValidationError("Nama donatur wajib diisi")
        return donor_name

    def clean_qurban_owner_name(self):
        return (self.cleaned_data.get('qurban_owner_name') or '').strip()

    def clean_proof_image(self):
        """Images only, at most 5 MB"""
        image = self.cleaned_data.get('proof_image')
        if image and getattr(image, 'size', 0) > settings.DONATIONS_PROOF_IMAGE_MAX_BYTES:
            raise ValidationError("Ukuran bukti transfer maksimal 5MB")
        return image

    def clean(self):
        cleaned_data = super().clean()

        # ZISWAF donations carry no qurban part and no attached program
        if cleaned_data.get('program_type') == Program.TYPE_ZISWAF:
            cleaned_data['ziswaf_program'] = None
            cleaned_data['qurban_amount'] = None
            cleaned_data['qurban_owner_name'] = ''

        return cleaned_data


class TransactionValidationForm(forms.Form):
    """Single transaction status transition"""

    status = forms.ChoiceField(
        choices=[(status, label) for status, label in Transaction.STATUS_CHOICES
                 if status in Transaction.VALIDATION_STATUSES]
    )
    status_reason = forms.CharField(required=False)


class TransactionStatusForm(forms.Form):
    """Status carried inside an update payload"""

    status = forms.ChoiceField(choices=Transaction.STATUS_CHOICES)
    status_reason = forms.CharField(required=False)


class BulkStatusUpdateForm(forms.Form):
    """Same status applied to a list of transaction ids"""

    ids = forms.JSONField()
    status = forms.ChoiceField(choices=Transaction.STATUS_CHOICES)

    def clean_ids(self):
        ids = self.cleaned_data.get('ids')
        if not isinstance(ids, list) or not ids:
            raise ValidationError("Pilih minimal satu transaksi")

        field = Transaction._meta.pk
        cleaned = []
        for value in ids:
            try:
                cleaned.append(field.to_python(value))
            except ValidationError:
                raise ValidationError(f"ID transaksi tidak valid: {value}")
        return cleaned


class TransactionFilterForm(forms.Form):
    """Query parameters of the transaction list"""

    status = forms.ChoiceField(choices=Transaction.STATUS_CHOICES, required=False)
    program_type = forms.ChoiceField(choices=Program._meta.get_field('type').choices, required=False)
    branch_id = forms.UUIDField(required=False)
    team_id = forms.UUIDField(required=False)
    volunteer_id = forms.IntegerField(required=False)
    payment_method_id = forms.UUIDField(required=False)
    search = forms.CharField(required=False)
    date_from = forms.CharField(required=False)
    date_to = forms.CharField(required=False)
    date_preset = forms.CharField(required=False)
