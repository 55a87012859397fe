"""
Import Views
============

Excel import of transactions and the import template download
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from donations.permissions import PermissionChecker, api_login_required
from donations.utils.excel_export import export_import_template
from donations.utils.excel_import import (
    TransactionSheetImporter,
    IMPORT_HEADERS,
    IMPORT_INSTRUCTIONS,
    IMPORT_EXAMPLE_ROWS,
)


logger = logging.getLogger(__name__)


@require_POST
@api_login_required
def transaction_import(request):
    """
    Import transactions from an uploaded .xlsx

    Every row is validated independently and only valid rows are saved.
    Response distinguishes full success, partial success and total failure.
    """
    checker = PermissionChecker(request.user)
    if not checker.can_import_transactions():
        raise PermissionDenied

    uploaded = request.FILES.get('file')
    if uploaded is None:
        raise ValidationError({'file': 'File Excel wajib diunggah'})
    if not uploaded.name.lower().endswith(('.xlsx', '.xls')):
        raise ValidationError({'file': 'File harus berformat .xlsx atau .xls'})

    result = TransactionSheetImporter(checker).run(uploaded)
    payload = result.as_dict()

    if result.success_count and not result.failed_count:
        message = f'{result.success_count} transaksi berhasil diimpor'
        status = 201
    elif result.success_count:
        message = (
            f'{result.success_count} transaksi berhasil diimpor, '
            f'{result.failed_count} baris gagal'
        )
        status = 207
    else:
        message = 'Tidak ada transaksi yang berhasil diimpor'
        status = 422

    return JsonResponse({'message': message, **payload}, status=status)


@require_GET
@api_login_required
def transaction_import_template(request):
    return export_import_template(IMPORT_HEADERS, IMPORT_INSTRUCTIONS, IMPORT_EXAMPLE_ROWS)
