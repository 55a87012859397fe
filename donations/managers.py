"""
Custom QuerySets and Managers
==============================

Provides reusable query methods for common filtering operations
"""

from decimal import Decimal

from django.contrib.auth.models import BaseUserManager
from django.db import models
from django.db.models import Q, Sum, Count, F, Value, DecimalField
from django.db.models.functions import Coalesce


# Terminal statuses other than 'valid' are reported together as "rejected"
REJECTED_STATUSES = ['double_duta', 'double_input', 'not_in_account', 'other']

MONEY_FIELD = DecimalField(max_digits=17, decimal_places=2)
ZERO = Decimal('0.00')


def money_sum(expression, **kwargs):
    """Sum() that yields 0.00 instead of NULL on empty sets"""
    return Coalesce(Sum(expression, output_field=MONEY_FIELD, **kwargs), Value(ZERO), output_field=MONEY_FIELD)


def donation_total_expression():
    """amount + qurban_amount with missing values treated as zero"""
    return (
        Coalesce(F('amount'), Value(ZERO), output_field=MONEY_FIELD)
        + Coalesce(F('qurban_amount'), Value(ZERO), output_field=MONEY_FIELD)
    )


class ActiveInactiveQuerySet(models.QuerySet):
    """QuerySet with active/inactive filtering"""

    def active(self):
        """Get only active records"""
        return self.filter(is_active=True)


# =============================================================================
# USERS
# =============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication"""

    use_in_migrations = True

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email address is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', 'admin')
        return self.create_user(email, password, **extra_fields)

    def volunteers(self):
        """All volunteer accounts"""
        return self.filter(role='volunteer')

    def count_by_role(self):
        """{role: count} for every role, including empty ones"""
        counts = {role: 0 for role in ('admin', 'validator', 'volunteer', 'branch')}
        for row in self.values('role').annotate(total=Count('id')):
            counts[row['role']] = row['total']
        return counts


# =============================================================================
# PROGRAMS & PAYMENT METHODS
# =============================================================================

class ProgramQuerySet(models.QuerySet):

    def ziswaf(self):
        return self.filter(type='ZISWAF')

    def qurban(self):
        return self.filter(type='QURBAN')

    def of_type(self, program_type):
        return self.filter(type=program_type)


class ProgramManager(models.Manager):

    def get_queryset(self):
        return ProgramQuerySet(self.model, using=self._db)

    def ziswaf(self):
        return self.get_queryset().ziswaf()

    def qurban(self):
        return self.get_queryset().qurban()


class PaymentMethodManager(models.Manager):

    def get_queryset(self):
        return ActiveInactiveQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionQuerySet(models.QuerySet):
    """Custom QuerySet for donation transactions"""

    def with_related(self):
        """Join every relation the API serializes"""
        return self.select_related(
            'branch', 'team', 'volunteer', 'program', 'ziswaf_program',
            'payment_method', 'validated_by',
        )

    def for_volunteer(self, volunteer):
        return self.filter(volunteer=volunteer)

    def pending(self):
        return self.filter(status='pending')

    def valid(self):
        return self.filter(status='valid')

    def created_between(self, start=None, end=None):
        """Bound on created_at; a None bound is open"""
        queryset = self
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)
        return queryset

    def dated_between(self, start=None, end=None):
        """Bound on transaction_date; a None bound is open"""
        queryset = self
        if start is not None:
            queryset = queryset.filter(transaction_date__gte=start)
        if end is not None:
            queryset = queryset.filter(transaction_date__lte=end)
        return queryset

    def status_counts(self):
        """Transaction count per status, every status present"""
        counts = {status: 0 for status in ['pending', 'valid'] + REJECTED_STATUSES}
        for row in self.order_by().values('status').annotate(total=Count('id')):
            counts[row['status']] = row['total']
        return counts

    def valid_totals(self):
        """
        Money totals over valid transactions

        Returns dict with:
        - total_amount: amount + qurban_amount
        - ziswaf_amount: amount
        - qurban_amount: qurban_amount of QURBAN transactions
        """
        is_valid = Q(status='valid')
        totals = self.aggregate(
            total_amount=money_sum(donation_total_expression(), filter=is_valid),
            ziswaf_amount=money_sum('amount', filter=is_valid),
            qurban_amount=money_sum('qurban_amount', filter=is_valid & Q(program_type='QURBAN')),
        )
        return totals

    def bulk_set_status(self, status, validated_by=None, validated_at=None):
        """
        Single UPDATE over the queryset

        Returns the number of rows changed. Validator stamps are only written
        when a validating user is passed in.
        """
        values = {'status': status}
        if validated_by is not None:
            values['validated_by'] = validated_by
            values['validated_at'] = validated_at
        return self.update(**values)


class TransactionManager(models.Manager):
    """Custom Manager for Transaction model"""

    def get_queryset(self):
        return TransactionQuerySet(self.model, using=self._db)

    def with_related(self):
        return self.get_queryset().with_related()

    def missing_rate_snapshots(self):
        """Transactions whose rate snapshot was never captured"""
        return self.get_queryset().filter(
            Q(volunteer_rate__isnull=True)
            | Q(branch_rate__isnull=True)
            | Q(ziswaf_program__isnull=False, ziswaf_volunteer_rate__isnull=True)
            | Q(ziswaf_program__isnull=False, ziswaf_branch_rate__isnull=True)
        )
