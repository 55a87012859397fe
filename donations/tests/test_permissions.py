from django.test import TestCase

from donations.models import Transaction
from donations.permissions import PermissionChecker
from donations.tests.factories import DonationWorldMixin, make_transaction


class PermissionMatrixTests(DonationWorldMixin, TestCase):

    def setUp(self):
        self.own = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.foreign = make_transaction(self.other_volunteer, self.zakat, self.payment_method)

    def checker(self, user):
        return PermissionChecker(user)

    def test_admin_can_edit_validated_transactions(self):
        self.own.set_validation_status('valid', self.validator)
        self.assertTrue(self.checker(self.admin).can_edit_transaction(self.own))
        self.assertTrue(self.checker(self.admin).can_delete_transaction(self.own))

    def test_volunteer_edits_only_own_pending(self):
        checker = self.checker(self.volunteer)
        self.assertTrue(checker.can_edit_transaction(self.own))
        self.assertFalse(checker.can_edit_transaction(self.foreign))

        self.own.set_validation_status('valid', self.validator)
        self.assertFalse(checker.can_edit_transaction(self.own))
        self.assertFalse(checker.can_delete_transaction(self.own))

    def test_branch_user_edits_only_own_branch_pending(self):
        checker = self.checker(self.branch_user)
        self.assertTrue(checker.can_edit_transaction(self.own))
        self.assertFalse(checker.can_edit_transaction(self.foreign))

    def test_validator_cannot_edit(self):
        self.assertFalse(self.checker(self.validator).can_edit_transaction(self.own))

    def test_validation_rights(self):
        self.assertTrue(self.checker(self.validator).can_validate_transaction(self.foreign))
        self.assertTrue(self.checker(self.admin).can_validate_transaction(self.foreign))
        self.assertTrue(self.checker(self.branch_user).can_validate_transaction(self.own))
        self.assertFalse(self.checker(self.branch_user).can_validate_transaction(self.foreign))
        self.assertFalse(self.checker(self.volunteer).can_validate_transaction(self.own))

    def test_transaction_visibility(self):
        everything = Transaction.objects.all()
        self.assertEqual(self.checker(self.validator).filter_transactions(everything).count(), 2)
        self.assertEqual(list(self.checker(self.branch_user).filter_transactions(everything)), [self.own])
        self.assertEqual(list(self.checker(self.volunteer).filter_transactions(everything)), [self.own])

    def test_reports_and_imports(self):
        self.assertFalse(self.checker(self.volunteer).can_view_reports())
        self.assertTrue(self.checker(self.branch_user).can_view_reports())
        self.assertTrue(self.checker(self.branch_user).can_import_transactions())
        self.assertFalse(self.checker(self.validator).can_import_transactions())
        self.assertFalse(self.checker(self.validator).can_create_transaction())

    def test_admin_cannot_delete_self(self):
        checker = self.checker(self.admin)
        self.assertFalse(checker.can_delete_user(self.admin))
        self.assertTrue(checker.can_delete_user(self.volunteer))

    def test_attribution_defaults(self):
        self.assertEqual(
            self.checker(self.volunteer).attribution_defaults(),
            {'branch': self.branch.pk, 'team': self.team.pk, 'volunteer': self.volunteer.pk},
        )
        self.assertEqual(self.checker(self.branch_user).attribution_defaults(), {'branch': self.branch.pk})
        self.assertEqual(self.checker(self.admin).attribution_defaults(), {})
