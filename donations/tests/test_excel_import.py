from datetime import timedelta
from io import BytesIO

import pandas as pd
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone
from openpyxl import load_workbook

from donations.models import Transaction, User
from donations.tests.factories import DonationWorldMixin, make_user
from donations.utils.excel_import import IMPORT_HEADERS, MSG_REQUIRED, read_import_file


XLSX = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def row(number, donor='Hamba Allah', program_type='ZISWAF', program='Zakat Maal', ziswaf_program=None,
        amount=1000000, qurban_amount=None, owner=None, branch='Cabang Jakarta', team='Tim A',
        volunteer='Budi', payment_method='Transfer Bank', date='01/10/2026'):
    return [number, donor, program_type, program, ziswaf_program, amount, qurban_amount, owner,
            branch, team, volunteer, payment_method, date]


def workbook_bytes(rows, columns=IMPORT_HEADERS):
    output = BytesIO()
    pd.DataFrame(rows, columns=columns).to_excel(output, index=False, engine='openpyxl')
    return output.getvalue()


def upload(rows, name='transaksi.xlsx'):
    return SimpleUploadedFile(name, workbook_bytes(rows), content_type=XLSX)


class TransactionImportTests(DonationWorldMixin, TestCase):

    url = reverse('donations:transaction_import')

    def post_file(self, user, uploaded):
        self.client.force_login(user)
        return self.client.post(self.url, {'file': uploaded})

    def test_valid_rows_saved_and_invalid_rows_reported(self):
        response = self.post_file(self.admin, upload([
            row(1),
            row(2, donor='Siti', program_type='QURBAN', program='Qurban Kambing',
                ziswaf_program='Infaq Umum', amount=500000, qurban_amount=2000000, owner='Siti'),
            row(3, donor='Ahmad', date='15/10/2026 14:30:00'),
            row(4, donor=None),
        ]))

        self.assertEqual(response.status_code, 207)
        body = response.json()
        self.assertEqual(body['success'], 3)
        self.assertEqual(body['failed'], 1)
        self.assertEqual(body['rejected'], [{'row': 5, 'message': MSG_REQUIRED}])
        self.assertEqual([item['row'] for item in body['accepted']], [2, 3, 4])

        self.assertEqual(Transaction.objects.count(), 3)
        qurban = Transaction.objects.get(donor_name='Siti')
        self.assertEqual(qurban.ziswaf_program, self.infaq)
        self.assertIsNotNone(qurban.ziswaf_volunteer_rate)
        self.assertTrue(all(item.status == 'pending' for item in Transaction.objects.all()))

    def test_full_success_is_201(self):
        response = self.post_file(self.branch_user, upload([row(1)]))

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['success'], 1)

    def test_lookups_are_case_insensitive(self):
        response = self.post_file(self.admin, upload([
            row(1, program='zakat maal', branch='CABANG JAKARTA', team='tim a', volunteer='budi'),
        ]))
        self.assertEqual(response.status_code, 201)

    def test_nothing_valid_is_422(self):
        response = self.post_file(self.admin, upload([
            row(1, program='Tidak Ada'),
            row(2, date='2026-10-01'),
            row(3, amount='sejuta'),
        ]))

        self.assertEqual(response.status_code, 422)
        body = response.json()
        self.assertEqual(body['success'], 0)
        self.assertEqual([item['row'] for item in body['rejected']], [2, 3, 4])
        self.assertEqual(Transaction.objects.count(), 0)

    def test_qurban_row_needs_owner(self):
        response = self.post_file(self.admin, upload([
            row(1, program_type='QURBAN', program='Qurban Kambing', amount=None, qurban_amount=2000000),
        ]))
        self.assertEqual(response.status_code, 422)

    def test_branch_user_cannot_import_into_other_branch(self):
        response = self.post_file(self.branch_user, upload([
            row(1, branch='Cabang Bandung', team='Tim B', volunteer='Sari'),
        ]))

        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['rejected'][0]['row'], 2)

    def test_team_must_belong_to_branch(self):
        response = self.post_file(self.admin, upload([row(1, team='Tim B')]))
        self.assertEqual(response.status_code, 422)

    def test_volunteer_lookup_ignores_other_roles(self):
        namesake = make_user('budi.cabang@example.com', User.ROLE_BRANCH, 'Budi', self.branch)
        User.objects.filter(pk=namesake.pk).update(date_joined=timezone.now() - timedelta(days=365))

        response = self.post_file(self.admin, upload([row(1)]))

        self.assertEqual(response.status_code, 201)
        self.assertEqual(Transaction.objects.get().volunteer, self.volunteer)

    def test_volunteer_must_belong_to_branch(self):
        response = self.post_file(self.admin, upload([row(1, volunteer='Sari')]))

        self.assertEqual(response.status_code, 422)
        self.assertIn("Relawan 'Sari'", response.json()['rejected'][0]['message'])
        self.assertFalse(Transaction.objects.exists())

    def test_wrong_extension(self):
        uploaded = SimpleUploadedFile('transaksi.csv', b'a,b\n1,2\n', content_type='text/csv')
        response = self.post_file(self.admin, uploaded)

        self.assertEqual(response.status_code, 422)
        self.assertIn('file', response.json()['errors'])

    def test_missing_file(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.post(self.url).status_code, 422)

    def test_missing_columns(self):
        uploaded = SimpleUploadedFile('transaksi.xlsx', workbook_bytes([[1, 'x']], ['No', 'Nama Donatur']))
        response = self.post_file(self.admin, uploaded)
        self.assertEqual(response.status_code, 422)

    def test_volunteer_forbidden(self):
        response = self.post_file(self.volunteer, upload([row(1)]))
        self.assertEqual(response.status_code, 403)


class ReadImportFileTests(TestCase):

    @override_settings(DONATIONS_IMPORT_MAX_ROWS=2)
    def test_row_limit(self):
        with self.assertRaises(ValidationError):
            read_import_file(BytesIO(workbook_bytes([row(1), row(2), row(3)])))

    def test_row_numbers_follow_spreadsheet(self):
        rows = read_import_file(BytesIO(workbook_bytes([row(1), row(2)])))

        self.assertEqual([number for number, _ in rows], [2, 3])
        self.assertEqual(rows[0][1]['donor_name'], 'Hamba Allah')
        self.assertIsNone(rows[0][1]['ziswaf_program'])


class ImportTemplateTests(DonationWorldMixin, TestCase):

    def test_template_has_thirteen_columns_and_instructions(self):
        self.client.force_login(self.admin)
        response = self.client.get(reverse('donations:transaction_import_template'))

        self.assertEqual(response.status_code, 200)
        workbook = load_workbook(BytesIO(response.content))
        self.assertEqual(workbook.sheetnames, ['Template Import', 'Petunjuk'])

        headers = [cell.value for cell in workbook['Template Import'][1]]
        self.assertEqual(headers, IMPORT_HEADERS)
        self.assertEqual(len(headers), 13)
