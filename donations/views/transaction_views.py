"""
Transaction Views
=================

CRUD for donation transactions plus the caller-scoped views:

- GET/POST   /transactions
- GET/PUT/DELETE /transactions/<id>   (POST to the item = multipart update)
- GET        /transactions/pending
- GET        /transactions/my, /transactions/my/stats
- GET        /transactions/export
"""

import logging

from django.core.exceptions import PermissionDenied
from django.db import transaction as db_transaction
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from donations.forms.transaction_forms import (
    TransactionForm,
    TransactionStatusForm,
    TransactionFilterForm,
)
from donations.models import Transaction
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_transaction, serialize_page
from donations.utils.date_filters import resolve_list_window, window_label
from donations.utils.excel_export import export_transactions_excel
from donations.utils.http import (
    parse_request_data,
    merge_with_instance,
    paginate,
    form_error_response,
    without_keys,
)
from donations.utils.reporting import empty_rollup, add_to_rollup, ROLLUP_FIELDS, serialize_rollup


logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def filtered_transactions(request, checker):
    """
    Role-scoped transaction queryset with the list filters applied

    Returns (form, queryset, (window_start, window_end)). The queryset is
    None when the filter parameters do not validate.
    """
    form = TransactionFilterForm(request.GET)
    if not form.is_valid():
        return form, None, None

    filters = form.cleaned_data
    transactions = checker.filter_transactions(Transaction.objects.with_related())

    if filters['status']:
        transactions = transactions.filter(status=filters['status'])
    if filters['program_type']:
        transactions = transactions.filter(program_type=filters['program_type'])
    if filters['branch_id']:
        transactions = transactions.filter(branch_id=filters['branch_id'])
    if filters['team_id']:
        transactions = transactions.filter(team_id=filters['team_id'])
    if filters['volunteer_id']:
        transactions = transactions.filter(volunteer_id=filters['volunteer_id'])
    if filters['payment_method_id']:
        transactions = transactions.filter(payment_method_id=filters['payment_method_id'])
    if filters['search']:
        transactions = transactions.filter(donor_name__icontains=filters['search'])

    window = resolve_list_window(filters['date_preset'], filters['date_from'], filters['date_to'])
    transactions = transactions.dated_between(*window)

    return form, transactions.order_by('-created_at'), window


def _created_response(transaction):
    return JsonResponse({
        'success': True,
        'message': 'Transaksi berhasil disimpan',
        'data': serialize_transaction(transaction),
    }, status=201)


# =============================================================================
# COLLECTION
# =============================================================================

@require_http_methods(['GET', 'POST'])
@api_login_required
def transaction_collection(request):
    if request.method == 'POST':
        return transaction_create(request)
    return transaction_list(request)


def transaction_list(request):
    """
    Paginated, role-scoped list (20 per page)

    - Admin/Validator: all transactions
    - Branch: own branch
    - Volunteer: own submissions
    """
    checker = PermissionChecker(request.user)
    form, transactions, _ = filtered_transactions(request, checker)
    if transactions is None:
        return form_error_response(form)

    page = paginate(request, transactions)
    return JsonResponse(serialize_page(page, serialize_transaction))


def transaction_create(request):
    """
    Record a donation

    Volunteers get branch/team/volunteer filled from their account; branch
    users get their branch. Rates are snapshotted by the model on save.
    """
    checker = PermissionChecker(request.user)
    if not checker.can_create_transaction():
        raise PermissionDenied

    data, files = parse_request_data(request)
    data = without_keys(data, 'status', 'status_reason', 'validated_at', 'validated_by')
    data.update(checker.attribution_defaults())

    form = TransactionForm(data, files)
    if not form.is_valid():
        return form_error_response(form)

    with db_transaction.atomic():
        transaction = form.save()

    logger.info(
        f"Transaction {transaction.pk} created by user {request.user.pk} "
        f"({transaction.program_type}, total {transaction.total_amount})"
    )
    return _created_response(transaction)


# =============================================================================
# ITEM
# =============================================================================

@require_http_methods(['GET', 'PUT', 'PATCH', 'POST', 'DELETE'])
@api_login_required
def transaction_item(request, transaction_id):
    transaction = get_object_or_404(Transaction.objects.with_related(), pk=transaction_id)
    checker = PermissionChecker(request.user)

    if not checker.can_view_transaction(transaction):
        raise PermissionDenied

    if request.method == 'GET':
        return JsonResponse({'success': True, 'data': serialize_transaction(transaction)})
    if request.method == 'DELETE':
        return transaction_delete(request, transaction, checker)
    return transaction_update(request, transaction, checker)


def transaction_update(request, transaction, checker):
    """
    Update a transaction

    Only the submitted fields change. Status stays as-is unless the payload
    carries one, which requires validation rights. A new proof image
    replaces (and deletes) the previous file.
    """
    if not checker.can_edit_transaction(transaction):
        raise PermissionDenied

    data, files = parse_request_data(request)

    status_data = None
    if data.get('status') not in (None, ''):
        if not checker.can_validate_transaction(transaction):
            raise PermissionDenied
        status_form = TransactionStatusForm({
            'status': data.get('status'),
            'status_reason': data.get('status_reason', ''),
        })
        if not status_form.is_valid():
            return form_error_response(status_form)
        status_data = status_form.cleaned_data

    data = without_keys(data, 'status', 'status_reason', 'validated_at', 'validated_by', 'proof_image')
    payload = merge_with_instance(
        transaction, data, TransactionForm._meta.fields, file_fields=('proof_image',)
    )
    payload.update(checker.attribution_defaults())

    previous_image = transaction.proof_image.name if transaction.proof_image else ''

    form = TransactionForm(payload, files, instance=transaction)
    if not form.is_valid():
        return form_error_response(form)

    with db_transaction.atomic():
        transaction = form.save()

        if status_data and status_data['status'] != transaction.status:
            if status_data['status'] == Transaction.STATUS_PENDING:
                transaction.reset_to_pending(status_data['status_reason'])
            else:
                transaction.set_validation_status(
                    status_data['status'], request.user, status_data['status_reason']
                )

    if files.get('proof_image') and previous_image and previous_image != transaction.proof_image.name:
        transaction.delete_stored_proof_image(previous_image)

    logger.info(f"Transaction {transaction.pk} updated by user {request.user.pk}")

    return JsonResponse({
        'success': True,
        'message': 'Transaksi berhasil diperbarui',
        'data': serialize_transaction(transaction),
    })


def transaction_delete(request, transaction, checker):
    """
    Delete a transaction and its proof image

    - Admin: any transaction
    - Branch: own branch, pending only
    - Volunteer: own, pending only
    """
    if not checker.can_delete_transaction(transaction):
        raise PermissionDenied

    transaction_id = transaction.pk
    transaction.delete()
    logger.info(f"Transaction {transaction_id} deleted by user {request.user.pk}")

    return JsonResponse({'success': True, 'message': 'Transaksi berhasil dihapus'})


# =============================================================================
# SCOPED LISTS
# =============================================================================

@require_GET
@api_login_required
def transaction_pending(request):
    """Validation queue, oldest first; branch users see their branch only"""
    checker = PermissionChecker(request.user)
    if not checker.can_validate_transactions():
        raise PermissionDenied

    transactions = checker.filter_transactions(Transaction.objects.with_related()).pending()
    page = paginate(request, transactions.order_by('created_at'))
    return JsonResponse(serialize_page(page, serialize_transaction))


def _my_transactions(checker):
    transactions = Transaction.objects.with_related()
    if checker.is_branch():
        return transactions.filter(branch_id=checker.user.branch_id)
    return transactions.for_volunteer(checker.user)


@require_GET
@api_login_required
def my_transactions(request):
    """Volunteer: own submissions. Branch: own branch."""
    checker = PermissionChecker(request.user)
    transactions = _my_transactions(checker)

    status = request.GET.get('status')
    if status:
        transactions = transactions.filter(status=status)

    page = paginate(request, transactions.order_by('-created_at'))
    return JsonResponse(serialize_page(page, serialize_transaction))


@require_GET
@api_login_required
def my_transaction_stats(request):
    """
    Totals for the caller's own transactions

    Commission is the branch side for branch users and the volunteer side
    for everybody else.
    """
    checker = PermissionChecker(request.user)
    transactions = _my_transactions(checker)
    side = 'branch_commission' if checker.is_branch() else 'volunteer_commission'

    rollup = empty_rollup()
    valid_rollup = empty_rollup()
    for row in transactions.order_by().values(*ROLLUP_FIELDS):
        add_to_rollup(rollup, row, side)
        if row['status'] == Transaction.STATUS_VALID:
            add_to_rollup(valid_rollup, row, side)

    return JsonResponse({
        'success': True,
        'data': {
            **serialize_rollup(rollup),
            'status_counts': transactions.status_counts(),
            'valid_donations': str(valid_rollup['total_donations']),
            'valid_commission': str(valid_rollup['total_commission']),
        },
    })


# =============================================================================
# EXPORT
# =============================================================================

@require_GET
@api_login_required
def transaction_export(request):
    """The filtered list as .xlsx"""
    checker = PermissionChecker(request.user)
    form, transactions, window = filtered_transactions(request, checker)
    if transactions is None:
        return form_error_response(form)

    logger.info(f"Transaction export by user {request.user.pk}")
    return export_transactions_excel(transactions, window_label(*window))
