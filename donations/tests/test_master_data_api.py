from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from donations.models import Branch, PaymentMethod, Program, Team, User
from donations.tests.factories import DonationWorldMixin, make_transaction


class BranchAndTeamApiTests(DonationWorldMixin, TestCase):

    def test_admin_creates_branch(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:branch_collection'), {
            'name': 'Cabang Medan', 'code': 'MDN', 'address': 'Jl. Gatot Subroto',
        })

        self.assertEqual(response.status_code, 201)
        self.assertTrue(Branch.objects.filter(code='MDN').exists())

    def test_branch_code_is_unique_case_insensitive(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:branch_collection'), {
            'name': 'Cabang Lain', 'code': 'jkt', 'address': '-',
        })

        self.assertEqual(response.status_code, 422)
        self.assertIn('code', response.json()['errors'])

    def test_non_admin_cannot_create(self):
        self.client.force_login(self.validator)
        response = self.post_json(reverse('donations:branch_collection'), {
            'name': 'Cabang Medan', 'code': 'MDN', 'address': '-',
        })
        self.assertEqual(response.status_code, 403)

    def test_branch_user_lists_own_branch(self):
        self.client.force_login(self.branch_user)
        data = self.client.get(reverse('donations:branch_collection')).json()['data']
        self.assertEqual([item['code'] for item in data], ['JKT'])

    def test_partial_update(self):
        self.client.force_login(self.admin)
        response = self.put_json(reverse('donations:branch_item', args=[self.branch.pk]), {'name': 'Cabang DKI'})

        self.assertEqual(response.status_code, 200)
        self.branch.refresh_from_db()
        self.assertEqual(self.branch.name, 'Cabang DKI')
        self.assertEqual(self.branch.code, 'JKT')

    def test_branch_with_transactions_cannot_be_deleted(self):
        make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.client.force_login(self.admin)

        response = self.client.delete(reverse('donations:branch_item', args=[self.branch.pk]))

        self.assertEqual(response.status_code, 409)
        self.assertTrue(Branch.objects.filter(pk=self.branch.pk).exists())

    def test_teams_filtered_by_branch(self):
        self.client.force_login(self.admin)
        data = self.client.get(reverse('donations:team_collection'), {'branch_id': str(self.other_branch.pk)}).json()['data']
        self.assertEqual([item['code'] for item in data], ['BDG-B'])

    def test_create_team(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:team_collection'), {
            'name': 'Tim C', 'code': 'JKT-C', 'branch': str(self.branch.pk),
        })

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Team.objects.get(code='JKT-C').branch, self.branch)


class ProgramApiTests(DonationWorldMixin, TestCase):

    def test_filter_by_type(self):
        self.client.force_login(self.volunteer)
        data = self.client.get(reverse('donations:program_collection'), {'type': 'QURBAN'}).json()['data']
        self.assertEqual([item['code'] for item in data], ['QKB'])

    def test_rates_must_be_percentages(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:program_collection'), {
            'type': 'ZISWAF', 'name': 'Sedekah', 'code': 'SDK',
            'volunteer_rate': '120', 'branch_rate': '5',
        })

        self.assertEqual(response.status_code, 422)
        self.assertIn('volunteer_rate', response.json()['errors'])

    def test_rate_update_leaves_transactions_alone(self):
        transaction = make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.client.force_login(self.admin)

        response = self.put_json(reverse('donations:program_item', args=[self.zakat.pk]), {'volunteer_rate': '40'})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(Program.objects.get(pk=self.zakat.pk).volunteer_rate, Decimal('40.00'))
        transaction.refresh_from_db()
        self.assertEqual(transaction.volunteer_rate, Decimal('15.00'))

    def test_type_locked_once_used(self):
        make_transaction(self.volunteer, self.zakat, self.payment_method)
        self.client.force_login(self.admin)

        response = self.put_json(reverse('donations:program_item', args=[self.zakat.pk]), {'type': 'QURBAN'})
        self.assertEqual(response.status_code, 422)


class PaymentMethodApiTests(DonationWorldMixin, TestCase):

    def setUp(self):
        self.retired = PaymentMethod.objects.create(name='Cek', is_active=False)

    def test_list_is_public_and_active_only(self):
        data = self.client.get(reverse('donations:payment_method_collection')).json()['data']
        self.assertEqual([item['name'] for item in data], ['Transfer Bank'])

    def test_include_inactive(self):
        data = self.client.get(reverse('donations:payment_method_collection'), {'include_inactive': '1'}).json()['data']
        self.assertEqual({item['name'] for item in data}, {'Transfer Bank', 'Cek'})

    def test_anonymous_cannot_create(self):
        response = self.post_json(reverse('donations:payment_method_collection'), {'name': 'QRIS'})
        self.assertEqual(response.status_code, 401)

    def test_admin_creates_active_method(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:payment_method_collection'), {'name': 'QRIS'})

        self.assertEqual(response.status_code, 201)
        self.assertTrue(PaymentMethod.objects.get(name='QRIS').is_active)


class UserApiTests(DonationWorldMixin, TestCase):

    def test_admin_creates_volunteer(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:user_collection'), {
            'name': 'Dewi', 'email': 'Dewi@Example.com', 'password': 'rahasia-456',
            'role': 'volunteer', 'branch': str(self.branch.pk), 'team': str(self.team.pk),
        })

        self.assertEqual(response.status_code, 201)
        user = User.objects.get(email='dewi@example.com')
        self.assertTrue(user.check_password('rahasia-456'))

    def test_volunteer_requires_team(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:user_collection'), {
            'name': 'Dewi', 'email': 'dewi@example.com', 'password': 'rahasia-456',
            'role': 'volunteer', 'branch': str(self.branch.pk),
        })

        self.assertEqual(response.status_code, 422)
        self.assertIn('team', response.json()['errors'])

    def test_password_required_on_create(self):
        self.client.force_login(self.admin)
        response = self.post_json(reverse('donations:user_collection'), {
            'name': 'Val', 'email': 'val@example.com', 'role': 'validator',
        })
        self.assertIn('password', response.json()['errors'])

    def test_list_filters(self):
        self.client.force_login(self.admin)
        body = self.client.get(reverse('donations:user_collection'), {'role': 'volunteer'}).json()
        self.assertEqual({item['name'] for item in body['data']}, {'Budi', 'Sari'})

        body = self.client.get(reverse('donations:user_collection'), {'team_id': str(self.other_team.pk)}).json()
        self.assertEqual([item['name'] for item in body['data']], ['Sari'])

    def test_users_by_branch_and_team(self):
        self.client.force_login(self.admin)

        by_branch = self.client.get(reverse('donations:users_by_branch', args=[self.branch.pk])).json()['data']
        self.assertEqual({item['name'] for item in by_branch}, {'Admin Jakarta', 'Budi'})

        by_team = self.client.get(reverse('donations:users_by_team', args=[self.other_team.pk])).json()['data']
        self.assertEqual([item['name'] for item in by_team], ['Sari'])

    def test_admin_cannot_delete_self(self):
        self.client.force_login(self.admin)
        response = self.client.delete(reverse('donations:user_item', args=[self.admin.pk]))

        self.assertEqual(response.status_code, 403)
        self.assertTrue(User.objects.filter(pk=self.admin.pk).exists())

    def test_admin_deletes_other_user(self):
        self.client.force_login(self.admin)
        response = self.client.delete(reverse('donations:user_item', args=[self.validator.pk]))
        self.assertEqual(response.status_code, 200)

    def test_update_keeps_password_when_blank(self):
        self.client.force_login(self.admin)
        response = self.put_json(reverse('donations:user_item', args=[self.volunteer.pk]), {'phone': '0812'})

        self.assertEqual(response.status_code, 200)
        self.volunteer.refresh_from_db()
        self.assertEqual(self.volunteer.phone, '0812')
        self.assertTrue(self.volunteer.check_password('rahasia-123'))
