from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from donations.models import Transaction, User, AppSetting
from donations.tests.factories import DonationWorldMixin, make_transaction, make_user


class RateSnapshotTests(DonationWorldMixin, TestCase):

    def test_rates_are_copied_on_create(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        transaction.refresh_from_db()

        self.assertEqual(transaction.volunteer_rate, Decimal('15.00'))
        self.assertEqual(transaction.branch_rate, Decimal('70.00'))
        self.assertIsNone(transaction.ziswaf_volunteer_rate)

    def test_program_rate_change_does_not_touch_existing_transactions(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)

        self.zakat.volunteer_rate = Decimal('50')
        self.zakat.save()

        transaction.refresh_from_db()
        self.assertEqual(transaction.volunteer_rate, Decimal('15.00'))
        self.assertEqual(transaction.volunteer_commission, Decimal('150000'))

    def test_saving_without_program_change_keeps_snapshot(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.zakat.volunteer_rate = Decimal('50')
        self.zakat.save()

        transaction = Transaction.objects.get(pk=transaction.pk)
        transaction.donor_name = 'Fulan'
        transaction.amount = Decimal('2000000')
        transaction.save()

        transaction.refresh_from_db()
        self.assertEqual(transaction.volunteer_rate, Decimal('15.00'))

    def test_changing_program_takes_new_program_rates(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)

        transaction = Transaction.objects.get(pk=transaction.pk)
        transaction.program = self.infaq
        transaction.save()

        transaction.refresh_from_db()
        self.assertEqual(transaction.branch_rate, Decimal('5.00'))

    def test_qurban_snapshots_attached_ziswaf_rates(self):
        transaction = make_transaction(
            self.volunteer, self.qurban, self.payment_method,
            ziswaf_program=self.infaq, amount=Decimal('500000'),
        )
        transaction.refresh_from_db()

        self.assertEqual(transaction.volunteer_rate, Decimal('10.00'))
        self.assertEqual(transaction.ziswaf_volunteer_rate, Decimal('15.00'))
        self.assertEqual(transaction.volunteer_commission, Decimal('275000'))

    def test_removing_ziswaf_program_clears_its_rates(self):
        transaction = make_transaction(
            self.volunteer, self.qurban, self.payment_method,
            ziswaf_program=self.infaq, amount=Decimal('500000'),
        )

        transaction = Transaction.objects.get(pk=transaction.pk)
        transaction.ziswaf_program = None
        transaction.save()

        transaction.refresh_from_db()
        self.assertIsNone(transaction.ziswaf_volunteer_rate)
        self.assertIsNone(transaction.ziswaf_branch_rate)

    def test_ziswaf_transaction_never_keeps_ziswaf_program(self):
        transaction = make_transaction(
            self.volunteer, self.zakat, self.payment_method, ziswaf_program=self.infaq
        )
        transaction.refresh_from_db()
        self.assertIsNone(transaction.ziswaf_program_id)

    def test_total_amount_adds_both_parts(self):
        transaction = make_transaction(
            self.volunteer, self.qurban, self.payment_method,
            ziswaf_program=self.infaq, amount=Decimal('500000'),
        )
        self.assertEqual(transaction.total_amount, Decimal('2500000'))


class TransactionCleanTests(DonationWorldMixin, TestCase):

    def build(self, **fields):
        values = {
            'branch': self.branch,
            'team': self.team,
            'volunteer': self.volunteer,
            'program_type': 'QURBAN',
            'program': self.qurban,
            'payment_method': self.payment_method,
            'donor_name': 'Fulan',
            'qurban_amount': Decimal('2000000'),
            'qurban_owner_name': 'Fulan',
        }
        values.update(fields)
        return Transaction(**values)

    def test_qurban_requires_owner_name(self):
        with self.assertRaises(ValidationError) as caught:
            self.build(qurban_owner_name='').clean()
        self.assertIn('qurban_owner_name', caught.exception.message_dict)

    def test_qurban_with_ziswaf_program_requires_amount(self):
        with self.assertRaises(ValidationError) as caught:
            self.build(ziswaf_program=self.infaq).clean()
        self.assertIn('amount', caught.exception.message_dict)

    def test_ziswaf_requires_amount(self):
        with self.assertRaises(ValidationError) as caught:
            self.build(program_type='ZISWAF', program=self.zakat).clean()
        self.assertIn('amount', caught.exception.message_dict)

    def test_program_must_match_type(self):
        with self.assertRaises(ValidationError) as caught:
            self.build(program=self.zakat).clean()
        self.assertIn('program', caught.exception.message_dict)

    def test_team_must_belong_to_branch(self):
        with self.assertRaises(ValidationError) as caught:
            self.build(team=self.other_team).clean()
        self.assertIn('team', caught.exception.message_dict)


class ValidationWorkflowTests(DonationWorldMixin, TestCase):

    def test_set_validation_status_stamps_validator(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)

        transaction.set_validation_status('double_input', self.validator, 'Sudah diinput')
        transaction.refresh_from_db()

        self.assertEqual(transaction.status, 'double_input')
        self.assertEqual(transaction.status_reason, 'Sudah diinput')
        self.assertEqual(transaction.validated_by, self.validator)
        self.assertIsNotNone(transaction.validated_at)

    def test_pending_is_not_a_validation_outcome(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        with self.assertRaises(ValidationError):
            transaction.set_validation_status('pending', self.validator)

    def test_revalidation_reassigns_outcome(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        transaction.set_validation_status('valid', self.validator)
        transaction.set_validation_status('not_in_account', self.admin)

        transaction.refresh_from_db()
        self.assertEqual(transaction.status, 'not_in_account')
        self.assertEqual(transaction.validated_by, self.admin)

    def test_reset_to_pending_clears_stamps(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        transaction.set_validation_status('valid', self.validator)

        transaction.reset_to_pending()
        transaction.refresh_from_db()

        self.assertTrue(transaction.is_pending)
        self.assertIsNone(transaction.validated_by)
        self.assertIsNone(transaction.validated_at)


class UserAndSettingTests(DonationWorldMixin, TestCase):

    def test_volunteer_needs_branch_and_team(self):
        user = User(email='x@example.com', name='X', role=User.ROLE_VOLUNTEER)
        with self.assertRaises(ValidationError) as caught:
            user.clean()
        self.assertIn('branch', caught.exception.message_dict)
        self.assertIn('team', caught.exception.message_dict)

    def test_team_outside_branch_is_rejected(self):
        user = User(
            email='x@example.com', name='X', role=User.ROLE_VOLUNTEER,
            branch=self.branch, team=self.other_team,
        )
        with self.assertRaises(ValidationError):
            user.clean()

    def test_admin_needs_no_branch(self):
        user = make_user('boss@example.com', User.ROLE_ADMIN)
        user.clean()

    def test_app_setting_load_creates_single_record(self):
        first = AppSetting.load()
        second = AppSetting.load()

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.primary_color, '#2563eb')
        self.assertEqual(AppSetting.objects.count(), 1)
