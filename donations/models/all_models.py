"""
Donation Management - Consolidated Models
=========================================

Branches, teams, users, programs, payment methods, donation transactions
and the application settings record.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models, transaction as db_transaction
from django.utils import timezone
from django.core.validators import RegexValidator, MinValueValidator, MaxValueValidator
from django.core.exceptions import ValidationError
from decimal import Decimal

import logging

from .base import BaseModel, StatusTrackingMixin
from donations.managers import (
    REJECTED_STATUSES,
    UserManager,
    ProgramManager,
    PaymentMethodManager,
    TransactionManager,
)
from donations.utils.commission import calculate_commission, calculate_total_amount


logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

PROGRAM_TYPE_CHOICES = [
    ('ZISWAF', 'ZISWAF'),
    ('QURBAN', 'Qurban'),
]

RATE_VALIDATORS = [MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]

HEX_COLOR_VALIDATOR = RegexValidator(
    regex=r'^#[0-9A-Fa-f]{6}$',
    message="Warna harus dalam format hex, contoh #2563eb"
)


# =============================================================================
# BRANCH & TEAM
# =============================================================================

class Branch(BaseModel):
    """Branch office; owns teams, users and transactions"""

    name = models.CharField(max_length=255)
    code = models.CharField(
        max_length=50,
        unique=True,
        help_text="Unique branch code"
    )
    address = models.TextField()

    class Meta:
        verbose_name_plural = "Branches"
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


class Team(BaseModel):
    """Volunteer team inside a branch"""

    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    branch = models.ForeignKey(
        Branch,
        on_delete=models.CASCADE,
        related_name='teams'
    )

    class Meta:
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.code})"


# =============================================================================
# USER MODEL
# =============================================================================

class User(AbstractUser):
    """
    Email-based user with a single application role

    Roles:
    - admin: everything
    - validator: validates transactions, reads everything
    - branch: works inside one branch
    - volunteer: records own donations, belongs to one branch and team
    """

    ROLE_ADMIN = 'admin'
    ROLE_VALIDATOR = 'validator'
    ROLE_VOLUNTEER = 'volunteer'
    ROLE_BRANCH = 'branch'

    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_VALIDATOR, 'Validator'),
        (ROLE_VOLUNTEER, 'Relawan'),
        (ROLE_BRANCH, 'Cabang'),
    ]

    username = None
    first_name = None
    last_name = None

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=ROLE_VOLUNTEER,
        db_index=True
    )
    branch = models.ForeignKey(
        Branch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )
    team = models.ForeignKey(
        Team,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='users'
    )

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['name']

    objects = UserManager()

    class Meta:
        ordering = ['name']
        indexes = [
            models.Index(fields=['branch', 'role'], name='donations_u_branch__5d3f2a_idx'),
        ]

    def __str__(self):
        return f"{self.name} <{self.email}>"

    def get_full_name(self):
        return self.name

    def get_short_name(self):
        return self.name

    def clean(self):
        super().clean()

        errors = {}

        if self.role == self.ROLE_VOLUNTEER:
            if not self.branch_id:
                errors['branch'] = "Relawan harus terdaftar di cabang"
            if not self.team_id:
                errors['team'] = "Relawan harus terdaftar di tim"

        if self.role == self.ROLE_BRANCH and not self.branch_id:
            errors['branch'] = "Akun cabang harus terhubung ke cabang"

        if self.team_id and self.branch_id and self.team.branch_id != self.branch_id:
            errors['team'] = "Tim tidak berada di cabang yang dipilih"

        if errors:
            raise ValidationError(errors)


# =============================================================================
# PROGRAMS & PAYMENT METHODS
# =============================================================================

class Program(BaseModel):
    """
    Donation program with its commission rates

    Rates are copied onto each transaction when it is recorded; changing
    them here never alters transactions already on file.
    """

    TYPE_ZISWAF = 'ZISWAF'
    TYPE_QURBAN = 'QURBAN'

    type = models.CharField(max_length=10, choices=PROGRAM_TYPE_CHOICES, db_index=True)
    name = models.CharField(max_length=255)
    code = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True)
    volunteer_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=RATE_VALIDATORS,
        help_text="Volunteer commission (percent)"
    )
    branch_rate = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=RATE_VALIDATORS,
        help_text="Branch commission (percent)"
    )

    objects = ProgramManager()

    class Meta:
        ordering = ['type', 'name']

    def __str__(self):
        return f"{self.name} ({self.type})"


class PaymentMethod(BaseModel, StatusTrackingMixin):
    """Transfer channel a donation arrived through"""

    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True)

    objects = PaymentMethodManager()

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


# =============================================================================
# TRANSACTION
# =============================================================================

class Transaction(BaseModel):
    """
    Donation transaction

    ZISWAF donations use `amount`. QURBAN donations use `qurban_amount` and
    `qurban_owner_name` and may carry an attached ZISWAF donation through
    `ziswaf_program` + `amount`.
    """

    STATUS_PENDING = 'pending'
    STATUS_VALID = 'valid'

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('valid', 'Valid'),
        ('double_duta', 'Double Duta'),
        ('double_input', 'Double Input'),
        ('not_in_account', 'Tidak Ada di Rekening'),
        ('other', 'Lainnya'),
    ]

    VALIDATION_STATUSES = ['valid'] + REJECTED_STATUSES
    REJECTED_STATUSES = REJECTED_STATUSES

    # Attribution
    branch = models.ForeignKey(Branch, on_delete=models.PROTECT, related_name='transactions')
    team = models.ForeignKey(Team, on_delete=models.PROTECT, related_name='transactions')
    volunteer = models.ForeignKey(User, on_delete=models.PROTECT, related_name='transactions')

    # Classification
    program_type = models.CharField(max_length=10, choices=PROGRAM_TYPE_CHOICES, db_index=True)
    program = models.ForeignKey(Program, on_delete=models.PROTECT, related_name='transactions')
    ziswaf_program = models.ForeignKey(
        Program,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='attached_transactions',
        help_text="ZISWAF program attached to a QURBAN donation"
    )

    # Donor & amounts
    donor_name = models.CharField(max_length=255)
    amount = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )
    qurban_owner_name = models.CharField(max_length=255, blank=True)
    qurban_amount = models.DecimalField(
        max_digits=15, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0'))]
    )

    # Commission snapshots (percent)
    volunteer_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    branch_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    ziswaf_volunteer_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)
    ziswaf_branch_rate = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True)

    # Payment
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.PROTECT, related_name='transactions')
    transaction_date = models.DateTimeField(db_index=True)
    proof_image = models.ImageField(upload_to='transaction-proofs/', blank=True, max_length=255)

    # Validation
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    status_reason = models.TextField(blank=True)
    validated_at = models.DateTimeField(null=True, blank=True)
    validated_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='validated_transactions'
    )

    objects = TransactionManager()

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'created_at'], name='donations_t_status_8c1e4b_idx'),
            models.Index(fields=['branch', 'status'], name='donations_t_branch_3a9d7f_idx'),
            models.Index(fields=['volunteer', 'status'], name='donations_t_volunte_6b2c0e_idx'),
        ]

    def __str__(self):
        return f"{self.donor_name} - {self.program_type} ({self.get_status_display()})"

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def clean(self):
        super().clean()

        errors = {}

        if self.program_type == Program.TYPE_QURBAN:
            if self.qurban_amount is None:
                errors['qurban_amount'] = "Nominal qurban wajib diisi untuk program Qurban"
            if not (self.qurban_owner_name or '').strip():
                errors['qurban_owner_name'] = "Nama pemilik qurban wajib diisi untuk program Qurban"
            if self.ziswaf_program_id and self.amount is None:
                errors['amount'] = "Nominal ZISWAF wajib diisi jika program ZISWAF dipilih"
            if self.ziswaf_program_id and self.ziswaf_program.type != Program.TYPE_ZISWAF:
                errors['ziswaf_program'] = "Program tambahan harus bertipe ZISWAF"
        elif self.amount is None:
            errors['amount'] = "Nominal donasi wajib diisi"

        if self.program_id and self.program_type and self.program.type != self.program_type:
            errors['program'] = "Program tidak sesuai dengan jenis program"

        if self.team_id and self.branch_id and self.team.branch_id != self.branch_id:
            errors['team'] = "Tim tidak berada di cabang yang dipilih"

        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------------
    # Rate snapshots
    # -------------------------------------------------------------------------

    def snapshot_program_rates(self):
        """Copy the main program's rates onto this transaction"""
        self.volunteer_rate = self.program.volunteer_rate
        self.branch_rate = self.program.branch_rate

    def snapshot_ziswaf_rates(self):
        """Copy the attached ZISWAF program's rates, or clear them"""
        if self.ziswaf_program_id:
            self.ziswaf_volunteer_rate = self.ziswaf_program.volunteer_rate
            self.ziswaf_branch_rate = self.ziswaf_program.branch_rate
        else:
            self.ziswaf_volunteer_rate = None
            self.ziswaf_branch_rate = None

    def _stored_program_ids(self):
        return Transaction.objects.filter(pk=self.pk).values('program_id', 'ziswaf_program_id').first()

    def save(self, *args, **kwargs):
        """
        Persist, snapshotting rates on create and whenever a program link changes
        """
        update_fields = kwargs.get('update_fields')
        touches_programs = update_fields is None or bool(
            {'program', 'program_id', 'ziswaf_program', 'ziswaf_program_id'} & set(update_fields)
        )

        if touches_programs:
            if self.program_type != Program.TYPE_QURBAN:
                self.ziswaf_program = None

            stored = None if self._state.adding else self._stored_program_ids()
            if stored is None:
                self.snapshot_program_rates()
                self.snapshot_ziswaf_rates()
            else:
                if stored['program_id'] != self.program_id:
                    self.snapshot_program_rates()
                if stored['ziswaf_program_id'] != self.ziswaf_program_id:
                    self.snapshot_ziswaf_rates()

        super().save(*args, **kwargs)

    # -------------------------------------------------------------------------
    # Amounts
    # -------------------------------------------------------------------------

    @property
    def commission(self):
        return calculate_commission(self)

    @property
    def volunteer_commission(self):
        return self.commission['volunteer_commission']

    @property
    def branch_commission(self):
        return self.commission['branch_commission']

    @property
    def total_amount(self):
        return calculate_total_amount(self)

    @property
    def is_pending(self):
        return self.status == self.STATUS_PENDING

    # -------------------------------------------------------------------------
    # Workflow
    # -------------------------------------------------------------------------

    @db_transaction.atomic
    def set_validation_status(self, status, validated_by, reason=''):
        """
        Move the transaction to a validation outcome

        Stamps validated_at/validated_by. Re-invoking on an already
        validated transaction reassigns the outcome.
        """
        if status not in self.VALIDATION_STATUSES:
            raise ValidationError({'status': f"Status tidak valid: {status}"})

        previous = self.status
        self.status = status
        self.status_reason = reason or ''
        self.validated_at = timezone.now()
        self.validated_by = validated_by
        self.save(update_fields=['status', 'status_reason', 'validated_at', 'validated_by', 'updated_at'])

        logger.info(
            f"Transaction {self.pk} status {previous} -> {status} by user {validated_by.pk}"
        )

    @db_transaction.atomic
    def reset_to_pending(self, reason=''):
        """Send the transaction back to the validation queue"""
        self.status = self.STATUS_PENDING
        self.status_reason = reason or ''
        self.validated_at = None
        self.validated_by = None
        self.save(update_fields=['status', 'status_reason', 'validated_at', 'validated_by', 'updated_at'])
        logger.info(f"Transaction {self.pk} reset to pending")

    # -------------------------------------------------------------------------
    # Proof image file handling
    # -------------------------------------------------------------------------

    def delete_stored_proof_image(self, name=None):
        """Remove a stored proof image file (defaults to the current one)"""
        name = name or (self.proof_image.name if self.proof_image else '')
        if not name:
            return
        storage = self.proof_image.storage
        if storage.exists(name):
            storage.delete(name)
            logger.info(f"Removed proof image {name} of transaction {self.pk}")

    def delete(self, *args, **kwargs):
        image_name = self.proof_image.name if self.proof_image else ''
        result = super().delete(*args, **kwargs)
        if image_name:
            self.delete_stored_proof_image(image_name)
        return result


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================

class AppSetting(BaseModel):
    """Branding and theme shown by the web client"""

    DEFAULTS = {
        'app_title': 'Dashboard Donasi',
        'primary_color': '#2563eb',
        'secondary_color': '#1e40af',
        'background_color': '#ffffff',
        'text_color': '#1f2937',
        'sidebar_color': '#f8fafc',
    }

    app_title = models.CharField(max_length=255, default=DEFAULTS['app_title'])
    logo_url = models.CharField(max_length=500, blank=True)
    favicon_url = models.CharField(max_length=500, blank=True)
    primary_color = models.CharField(max_length=7, default=DEFAULTS['primary_color'], validators=[HEX_COLOR_VALIDATOR])
    secondary_color = models.CharField(max_length=7, default=DEFAULTS['secondary_color'], validators=[HEX_COLOR_VALIDATOR])
    background_color = models.CharField(max_length=7, default=DEFAULTS['background_color'], validators=[HEX_COLOR_VALIDATOR])
    text_color = models.CharField(max_length=7, default=DEFAULTS['text_color'], validators=[HEX_COLOR_VALIDATOR])
    sidebar_color = models.CharField(max_length=7, default=DEFAULTS['sidebar_color'], validators=[HEX_COLOR_VALIDATOR])

    class Meta:
        ordering = ['created_at']

    def __str__(self):
        return self.app_title

    @classmethod
    def load(cls):
        """The settings record, created with defaults on first use"""
        setting = cls.objects.order_by('created_at').first()
        if setting is None:
            setting = cls.objects.create()
        return setting
