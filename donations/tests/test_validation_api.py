import uuid

from django.test import TestCase, override_settings
from django.urls import reverse

from donations.models import Transaction
from donations.tests.factories import DonationWorldMixin, make_transaction


class ValidateEndpointTests(DonationWorldMixin, TestCase):

    def setUp(self):
        self.own = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.foreign = make_transaction(self.other_volunteer, self.zakat, self.payment_method)

    def validate_url(self, transaction):
        return reverse('donations:transaction_validate', args=[transaction.pk])

    def test_validator_sets_outcome(self):
        self.client.force_login(self.validator)
        response = self.post_json(self.validate_url(self.own), {
            'status': 'double_duta', 'status_reason': 'Tercatat dua relawan',
        })

        self.assertEqual(response.status_code, 200)
        data = response.json()['data']
        self.assertEqual(data['status'], 'double_duta')
        self.assertEqual(data['validated_by_id'], self.validator.pk)
        self.assertIsNotNone(data['validated_at'])

    def test_other_status_needs_no_reason(self):
        self.client.force_login(self.validator)
        response = self.post_json(self.validate_url(self.own), {'status': 'other'})
        self.assertEqual(response.status_code, 200)

    def test_pending_is_rejected(self):
        self.client.force_login(self.validator)
        response = self.post_json(self.validate_url(self.own), {'status': 'pending'})
        self.assertEqual(response.status_code, 422)

    def test_branch_user_limited_to_own_branch(self):
        self.client.force_login(self.branch_user)
        self.assertEqual(self.post_json(self.validate_url(self.own), {'status': 'valid'}).status_code, 200)
        self.assertEqual(self.post_json(self.validate_url(self.foreign), {'status': 'valid'}).status_code, 403)

    def test_volunteer_cannot_validate(self):
        self.client.force_login(self.volunteer)
        response = self.post_json(self.validate_url(self.own), {'status': 'valid'})
        self.assertEqual(response.status_code, 403)


class BulkStatusUpdateTests(DonationWorldMixin, TestCase):

    url = reverse('donations:transaction_bulk_update_status')

    def setUp(self):
        self.first = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.second = make_transaction(self.volunteer, self.qurban, self.payment_method)
        self.foreign = make_transaction(self.other_volunteer, self.zakat, self.payment_method)

    def ids(self, *transactions):
        return [str(transaction.pk) for transaction in transactions]

    def test_updates_listed_transactions_and_skips_missing(self):
        self.client.force_login(self.validator)
        response = self.post_json(self.url, {
            'ids': self.ids(self.first, self.second) + [str(uuid.uuid4())],
            'status': 'valid',
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['updated_count'], 2)
        self.assertEqual(Transaction.objects.filter(status='valid').count(), 2)

    def test_bulk_update_does_not_stamp_validator_by_default(self):
        self.client.force_login(self.validator)
        self.post_json(self.url, {'ids': self.ids(self.first), 'status': 'valid'})

        self.first.refresh_from_db()
        self.assertIsNone(self.first.validated_by)
        self.assertIsNone(self.first.validated_at)

    @override_settings(DONATIONS_BULK_STATUS_STAMPS_VALIDATOR=True)
    def test_bulk_update_stamps_when_enabled(self):
        self.client.force_login(self.validator)
        self.post_json(self.url, {'ids': self.ids(self.first), 'status': 'valid'})

        self.first.refresh_from_db()
        self.assertEqual(self.first.validated_by, self.validator)

    def test_branch_user_cannot_touch_other_branch(self):
        self.client.force_login(self.branch_user)
        response = self.post_json(self.url, {
            'ids': self.ids(self.first, self.foreign), 'status': 'double_input',
        })

        self.assertEqual(response.json()['updated_count'], 1)
        self.foreign.refresh_from_db()
        self.assertEqual(self.foreign.status, 'pending')

    def test_empty_ids_rejected(self):
        self.client.force_login(self.validator)
        response = self.post_json(self.url, {'ids': [], 'status': 'valid'})
        self.assertEqual(response.status_code, 422)

    def test_volunteer_forbidden(self):
        self.client.force_login(self.volunteer)
        response = self.post_json(self.url, {'ids': self.ids(self.first), 'status': 'valid'})
        self.assertEqual(response.status_code, 403)
