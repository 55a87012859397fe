from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase

from donations.models import Transaction, User, Program, PaymentMethod
from donations.tests.factories import DonationWorldMixin, make_transaction


class BackfillTransactionRatesTests(DonationWorldMixin, TestCase):

    def setUp(self):
        self.missing = make_transaction(
            self.volunteer, self.qurban, self.payment_method,
            ziswaf_program=self.infaq, amount=Decimal('500000'),
        )
        Transaction.objects.filter(pk=self.missing.pk).update(volunteer_rate=None, ziswaf_branch_rate=None)

        self.complete = make_transaction(self.volunteer, self.zakat, self.payment_method)
        Transaction.objects.filter(pk=self.complete.pk).update(volunteer_rate=Decimal('1'))

    def test_dry_run_writes_nothing(self):
        out = StringIO()
        call_command('backfill_transaction_rates', '--dry-run', stdout=out)

        self.assertIn('1 transaction', out.getvalue())
        self.missing.refresh_from_db()
        self.assertIsNone(self.missing.volunteer_rate)

    def test_fills_only_missing_snapshots(self):
        self.qurban.volunteer_rate = Decimal('12')
        self.qurban.save()

        call_command('backfill_transaction_rates', stdout=StringIO())

        self.missing.refresh_from_db()
        self.assertEqual(self.missing.volunteer_rate, Decimal('12.00'))
        self.assertEqual(self.missing.branch_rate, Decimal('5.00'))
        self.assertEqual(self.missing.ziswaf_branch_rate, Decimal('5.00'))

        self.complete.refresh_from_db()
        self.assertEqual(self.complete.volunteer_rate, Decimal('1.00'))


class SeedDemoDataTests(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_demo_data', stdout=StringIO())
        call_command('seed_demo_data', stdout=StringIO())

        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(Program.objects.qurban().count(), 2)
        self.assertEqual(PaymentMethod.objects.active().count(), 3)
        self.assertTrue(User.objects.get(email='admin@example.com').is_superuser)
