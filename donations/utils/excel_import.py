"""
Excel Import of Transactions
============================

validate-then-submit pipeline:

1. read the workbook with pandas (fixed 13-column template)
2. validate every row on its own, collecting accepted payloads and
   {row, message} rejections
3. submit only the accepted payloads through TransactionForm; rows the
   form refuses are moved to the rejected list

Row numbers are spreadsheet row numbers (the header is row 1).
"""

from dataclasses import dataclass, field
from datetime import datetime

import logging

import pandas as pd
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import transaction as db_transaction
from django.utils import timezone

from donations.models import Branch, Team, User, Program, PaymentMethod
from donations.utils.money import to_decimal


logger = logging.getLogger(__name__)


# (header, payload key); 'No' is informational only
IMPORT_COLUMNS = [
    ('No', None),
    ('Nama Donatur', 'donor_name'),
    ('Jenis Program', 'program_type'),
    ('Program', 'program'),
    ('Program ZISWAF', 'ziswaf_program'),
    ('Nominal', 'amount'),
    ('Nominal Qurban', 'qurban_amount'),
    ('Nama Pemilik Qurban', 'qurban_owner_name'),
    ('Cabang', 'branch'),
    ('Tim', 'team'),
    ('Relawan', 'volunteer'),
    ('Metode Pembayaran', 'payment_method'),
    ('Tanggal Transaksi', 'transaction_date'),
]

IMPORT_HEADERS = [header for header, _ in IMPORT_COLUMNS]

REQUIRED_KEYS = [
    'donor_name', 'program_type', 'program', 'branch', 'team',
    'volunteer', 'payment_method', 'transaction_date',
]

IMPORT_DATE_FORMATS = ['%d/%m/%Y %H:%M:%S', '%d/%m/%Y']

MSG_REQUIRED = 'Kolom wajib tidak boleh kosong'

IMPORT_INSTRUCTIONS = [
    ('No', 'Nomor urut (opsional, tidak diproses)'),
    ('Nama Donatur', 'Wajib. Nama donatur'),
    ('Jenis Program', 'Wajib. ZISWAF atau QURBAN'),
    ('Program', 'Wajib. Nama program sesuai data master dan jenis program'),
    ('Program ZISWAF', 'Opsional, hanya untuk QURBAN. Nama program ZISWAF tambahan'),
    ('Nominal', 'Wajib untuk ZISWAF, dan untuk QURBAN yang memiliki Program ZISWAF. Angka tanpa titik/koma'),
    ('Nominal Qurban', 'Wajib untuk QURBAN. Angka tanpa titik/koma'),
    ('Nama Pemilik Qurban', 'Wajib untuk QURBAN'),
    ('Cabang', 'Wajib. Nama cabang'),
    ('Tim', 'Wajib. Nama tim di cabang tersebut'),
    ('Relawan', 'Wajib. Nama relawan'),
    ('Metode Pembayaran', 'Wajib. Nama metode pembayaran yang aktif'),
    ('Tanggal Transaksi', 'Wajib. Format DD/MM/YYYY atau DD/MM/YYYY HH:MM:SS'),
    ('Batas', f'Maksimal {settings.DONATIONS_IMPORT_MAX_ROWS} baris per file'),
]

IMPORT_EXAMPLE_ROWS = [
    [1, 'Ahmad Fauzi', 'ZISWAF', 'Zakat Maal', '', 1000000, '', '', 'Cabang Jakarta', 'Tim A', 'Budi', 'Transfer Bank', '01/10/2026'],
    [2, 'Siti Aminah', 'QURBAN', 'Qurban Kambing', 'Infaq Umum', 500000, 2000000, 'Siti Aminah', 'Cabang Jakarta', 'Tim A', 'Budi', 'Transfer Bank', '02/10/2026 14:30:00'],
]


class RowError(Exception):
    """A single row failed validation"""


@dataclass
class ImportResult:
    accepted: list = field(default_factory=list)   # [{'row': n, 'payload': {...}}]
    rejected: list = field(default_factory=list)   # [{'row': n, 'message': str}]
    created: list = field(default_factory=list)    # [{'row': n, 'id': str}]

    @property
    def success_count(self):
        return len(self.created)

    @property
    def failed_count(self):
        return len(self.rejected)

    def as_dict(self):
        return {
            'success': self.success_count,
            'failed': self.failed_count,
            'accepted': self.created,
            'rejected': sorted(self.rejected, key=lambda item: item['row']),
        }


# =============================================================================
# READING
# =============================================================================

def _clean_cell(value):
    if value is None:
        return None
    if isinstance(value, float) and pd.isna(value):
        return None
    if value is pd.NaT:
        return None
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def read_import_file(uploaded_file):
    """
    Load the first sheet into a list of (row_number, {payload_key: value})

    Raises ValidationError when the file is unreadable, misses template
    columns or has more rows than allowed.
    """
    try:
        dataframe = pd.read_excel(uploaded_file, sheet_name=0, dtype=object)
    except Exception:
        logger.exception("Failed to read import workbook")
        raise ValidationError({'file': 'File Excel tidak dapat dibaca'})

    dataframe.columns = [str(column).strip() for column in dataframe.columns]
    missing = [header for header, key in IMPORT_COLUMNS if key and header not in dataframe.columns]
    if missing:
        raise ValidationError({'file': f"Kolom template tidak ditemukan: {', '.join(missing)}"})

    dataframe = dataframe.dropna(how='all')
    max_rows = settings.DONATIONS_IMPORT_MAX_ROWS
    if len(dataframe) > max_rows:
        raise ValidationError({'file': f'Maksimal {max_rows} baris per file'})

    rows = []
    for index, record in dataframe.iterrows():
        values = {key: _clean_cell(record[header]) for header, key in IMPORT_COLUMNS if key}
        rows.append((int(index) + 2, values))
    return rows


# =============================================================================
# VALIDATION
# =============================================================================

def parse_import_date(value):
    """DD/MM/YYYY or DD/MM/YYYY HH:MM:SS (or a real Excel date cell)"""
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, datetime):
        moment = value
    else:
        moment = None
        for fmt in IMPORT_DATE_FORMATS:
            try:
                moment = datetime.strptime(str(value).strip(), fmt)
                break
            except ValueError:
                continue
        if moment is None:
            raise RowError('Format tanggal harus DD/MM/YYYY atau DD/MM/YYYY HH:MM:SS')
    if timezone.is_naive(moment):
        moment = timezone.make_aware(moment)
    return moment


def parse_import_amount(value, label):
    try:
        amount = to_decimal(value)
    except ValueError:
        raise RowError(f'{label} harus berupa angka')
    if not amount.is_finite() or amount < 0:
        raise RowError(f'{label} harus berupa angka positif')
    return amount


def _text(value):
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


class TransactionSheetImporter:
    """
    Validates import rows against master data and submits the valid ones

    Name lookups are case-insensitive. Scoped roles can only import into
    their own branch.
    """

    def __init__(self, checker):
        self.checker = checker
        self.branches = {branch.name.lower(): branch for branch in Branch.objects.all()}
        self.teams = {}
        for team in Team.objects.all():
            self.teams[(team.branch_id, team.name.lower())] = team
        self.volunteers = {}
        for user in User.objects.volunteers().order_by('date_joined'):
            self.volunteers.setdefault((user.branch_id, user.name.lower()), user)
        self.payment_methods = {method.name.lower(): method for method in PaymentMethod.objects.active()}
        self.programs = {}
        for program in Program.objects.all():
            self.programs[(program.type, program.name.lower())] = program

    def validate_row(self, values):
        """Return the form payload for a row or raise RowError"""
        if any(values.get(key) in (None, '') for key in REQUIRED_KEYS):
            raise RowError(MSG_REQUIRED)

        program_type = _text(values['program_type']).upper()
        if program_type not in (Program.TYPE_ZISWAF, Program.TYPE_QURBAN):
            raise RowError('Jenis program harus ZISWAF atau QURBAN')

        has_ziswaf_program = program_type == Program.TYPE_QURBAN and values.get('ziswaf_program') is not None

        if program_type == Program.TYPE_QURBAN:
            if values.get('qurban_amount') is None or values.get('qurban_owner_name') is None:
                raise RowError('Nominal qurban dan nama pemilik qurban wajib diisi untuk program QURBAN')
            if has_ziswaf_program and values.get('amount') is None:
                raise RowError('Nominal wajib diisi jika Program ZISWAF diisi')
        elif values.get('amount') is None:
            raise RowError('Nominal wajib diisi untuk program ZISWAF')

        amount = parse_import_amount(values['amount'], 'Nominal') if values.get('amount') is not None else None
        qurban_amount = None
        if program_type == Program.TYPE_QURBAN:
            qurban_amount = parse_import_amount(values['qurban_amount'], 'Nominal qurban')

        transaction_date = parse_import_date(values['transaction_date'])

        branch = self.branches.get(_text(values['branch']).lower())
        if branch is None:
            raise RowError(f"Cabang '{_text(values['branch'])}' tidak ditemukan")
        if self.checker.is_branch() and branch.pk != self.checker.user.branch_id:
            raise RowError('Cabang berada di luar wewenang Anda')

        team = self.teams.get((branch.pk, _text(values['team']).lower()))
        if team is None:
            raise RowError(f"Tim '{_text(values['team'])}' tidak ditemukan di cabang {branch.name}")

        volunteer = self.volunteers.get((branch.pk, _text(values['volunteer']).lower()))
        if volunteer is None:
            raise RowError(f"Relawan '{_text(values['volunteer'])}' tidak ditemukan di cabang {branch.name}")

        payment_method = self.payment_methods.get(_text(values['payment_method']).lower())
        if payment_method is None:
            raise RowError(f"Metode pembayaran '{_text(values['payment_method'])}' tidak ditemukan")

        program = self.programs.get((program_type, _text(values['program']).lower()))
        if program is None:
            raise RowError(f"Program {program_type} '{_text(values['program'])}' tidak ditemukan")

        ziswaf_program = None
        if has_ziswaf_program:
            ziswaf_program = self.programs.get((Program.TYPE_ZISWAF, _text(values['ziswaf_program']).lower()))
            if ziswaf_program is None:
                raise RowError(f"Program ZISWAF '{_text(values['ziswaf_program'])}' tidak ditemukan")

        return {
            'donor_name': _text(values['donor_name']),
            'program_type': program_type,
            'program': str(program.pk),
            'ziswaf_program': str(ziswaf_program.pk) if ziswaf_program else '',
            'amount': str(amount) if amount is not None else '',
            'qurban_amount': str(qurban_amount) if qurban_amount is not None else '',
            'qurban_owner_name': _text(values['qurban_owner_name']) if values.get('qurban_owner_name') is not None else '',
            'branch': str(branch.pk),
            'team': str(team.pk),
            'volunteer': volunteer.pk,
            'payment_method': str(payment_method.pk),
            'transaction_date': timezone.localtime(transaction_date).strftime('%Y-%m-%d %H:%M:%S'),
        }

    def validate(self, rows):
        result = ImportResult()
        for row_number, values in rows:
            try:
                payload = self.validate_row(values)
            except RowError as exc:
                result.rejected.append({'row': row_number, 'message': str(exc)})
            else:
                result.accepted.append({'row': row_number, 'payload': payload})
        return result

    def submit(self, result):
        """Save accepted rows one by one; a failing row never blocks the others"""
        from donations.forms.transaction_forms import TransactionForm

        for item in result.accepted:
            form = TransactionForm(data=item['payload'])
            if not form.is_valid():
                messages = [f"{field}: {', '.join(errors)}" for field, errors in form.errors.items()]
                result.rejected.append({'row': item['row'], 'message': '; '.join(messages)})
                continue
            with db_transaction.atomic():
                transaction = form.save()
            result.created.append({'row': item['row'], 'id': str(transaction.pk)})

        logger.info(
            f"Import by user {self.checker.user.pk}: {result.success_count} created, "
            f"{result.failed_count} rejected"
        )
        return result

    def run(self, uploaded_file):
        rows = read_import_file(uploaded_file)
        return self.submit(self.validate(rows))
