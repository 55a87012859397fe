from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from donations.models import Transaction
from donations.tests.factories import DonationWorldMixin, make_transaction


class DashboardTests(DonationWorldMixin, TestCase):

    url = reverse('donations:dashboard')

    def setUp(self):
        self.valid_zakat = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.valid_zakat.set_validation_status('valid', self.validator)
        self.valid_qurban = make_transaction(
            self.volunteer, self.qurban, self.payment_method,
            ziswaf_program=self.infaq, amount=Decimal('500000'),
        )
        self.valid_qurban.set_validation_status('valid', self.validator)
        self.pending = make_transaction(self.other_volunteer, self.zakat, self.payment_method)
        self.rejected = make_transaction(self.other_volunteer, self.infaq, self.payment_method)
        self.rejected.set_validation_status('not_in_account', self.validator)

    def get_data(self, user, **params):
        self.client.force_login(user)
        response = self.client.get(self.url, params)
        self.assertEqual(response.status_code, 200)
        return response.json()['data']

    def test_transaction_stats(self):
        stats = self.get_data(self.admin)['transaction_stats']

        self.assertEqual(stats['total_transactions'], 4)
        self.assertEqual(stats['valid_transactions'], 2)
        self.assertEqual(stats['pending_transactions'], 1)
        self.assertEqual(stats['rejected_transactions'], 1)
        self.assertEqual(stats['validation_rate'], 50.0)
        self.assertEqual(Decimal(stats['total_amount']), Decimal('3500000'))
        self.assertEqual(Decimal(stats['ziswaf_amount']), Decimal('1500000'))
        self.assertEqual(Decimal(stats['qurban_amount']), Decimal('2000000'))
        self.assertEqual(stats['status_breakdown']['valid']['count'], 2)

    def test_filter_info_and_sections(self):
        data = self.get_data(self.admin, filter_type='all')

        self.assertEqual(data['filter_info'], {'filter_type': 'all', 'date_start': None, 'date_end': None})
        for key in ('user_stats', 'branch_stats', 'program_stats', 'volunteer_stats',
                    'monthly_trend', 'program_trend', 'recent_transactions'):
            self.assertIn(key, data)

    def test_volunteer_sees_own_numbers(self):
        stats = self.get_data(self.volunteer)['transaction_stats']
        self.assertEqual(stats['total_transactions'], 2)

    def test_branch_user_sees_branch_numbers(self):
        stats = self.get_data(self.branch_user)['transaction_stats']
        self.assertEqual(stats['total_transactions'], 2)

    def test_window_excludes_older_transactions(self):
        Transaction.objects.filter(pk=self.pending.pk).update(created_at=timezone.now() - timedelta(days=100))

        current = self.get_data(self.admin, filter_type='current_month')['transaction_stats']
        everything = self.get_data(self.admin, filter_type='all')['transaction_stats']

        self.assertEqual(current['total_transactions'], 3)
        self.assertEqual(everything['total_transactions'], 4)

    def test_date_range_requires_dates(self):
        self.client.force_login(self.admin)
        response = self.client.get(self.url, {'filter_type': 'date_range'})
        self.assertEqual(response.status_code, 422)

    def test_volunteer_filter_accepts_id_or_name(self):
        by_id = self.get_data(self.admin, volunteer_id=str(self.other_volunteer.pk))['transaction_stats']
        by_name = self.get_data(self.admin, volunteer_id='Sari')['transaction_stats']

        self.assertEqual(by_id['total_transactions'], 2)
        self.assertEqual(by_name['total_transactions'], 2)

    def test_program_name_filter(self):
        stats = self.get_data(self.admin, program_name='Zakat Maal')['transaction_stats']
        self.assertEqual(stats['total_transactions'], 2)

    def test_top_volunteers_only_count_valid(self):
        top = self.get_data(self.admin)['volunteer_stats']['top_volunteers']

        self.assertEqual(len(top), 1)
        self.assertEqual(top[0]['volunteer_name'], 'Budi')
        self.assertEqual(top[0]['transaction_count'], 2)
        self.assertEqual(Decimal(top[0]['total_amount']), Decimal('3500000'))

    def test_branch_and_program_performance(self):
        data = self.get_data(self.admin)

        branches = data['branch_stats']['branch_performance']
        self.assertEqual(data['branch_stats']['total_branches'], 2)
        self.assertEqual([row['branch_name'] for row in branches], ['Cabang Jakarta'])

        programs = {row['program_name']: row for row in data['program_stats']['program_performance']}
        self.assertEqual(programs['Qurban Kambing']['transaction_count'], 1)
        self.assertEqual(Decimal(programs['Qurban Kambing']['total_amount']), Decimal('2500000'))

    def test_monthly_trend_has_six_zero_filled_months(self):
        trend = self.get_data(self.admin)['monthly_trend']

        self.assertEqual(len(trend), 6)
        self.assertEqual(trend[-1]['transaction_count'], 2)
        self.assertEqual(trend[0]['transaction_count'], 0)
        self.assertEqual(Decimal(trend[0]['total_amount']), Decimal('0'))

    def test_program_trend(self):
        trend = self.get_data(self.admin)['program_trend']

        names = {item['program_name'] for item in trend}
        self.assertEqual(names, {'Zakat Maal', 'Qurban Kambing'})
        self.assertEqual(len(trend[0]['monthly_data']), 6)

    def test_recent_transactions(self):
        recent = self.get_data(self.admin)['recent_transactions']

        self.assertEqual(len(recent), 4)
        by_id = {item['id']: item for item in recent}
        self.assertEqual(by_id[str(self.rejected.pk)]['branch_name'], 'Cabang Bandung')
        self.assertEqual(by_id[str(self.rejected.pk)]['status'], 'not_in_account')

    def test_user_stats(self):
        stats = self.get_data(self.admin)['user_stats']

        self.assertEqual(stats['total_users'], 5)
        self.assertEqual(stats['by_role']['volunteer'], 2)

    def test_anonymous_gets_401(self):
        self.assertEqual(self.client.get(self.url).status_code, 401)
