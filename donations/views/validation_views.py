"""
Validation Views
================

Single-transaction status transition and the bulk variant
"""

import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_POST

from donations.forms.transaction_forms import TransactionValidationForm, BulkStatusUpdateForm
from donations.models import Transaction
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_transaction
from donations.utils.http import parse_request_data, form_error_response


logger = logging.getLogger(__name__)


@require_POST
@api_login_required
def transaction_validate(request, transaction_id):
    """
    Assign a validation outcome to one transaction

    Sets validated_at/validated_by. An already validated transaction can be
    re-validated to change its outcome.
    """
    transaction = get_object_or_404(Transaction.objects.with_related(), pk=transaction_id)
    checker = PermissionChecker(request.user)

    if not checker.can_validate_transaction(transaction):
        raise PermissionDenied

    data, _ = parse_request_data(request)
    form = TransactionValidationForm(data)
    if not form.is_valid():
        return form_error_response(form)

    transaction.set_validation_status(
        form.cleaned_data['status'],
        request.user,
        form.cleaned_data['status_reason'],
    )

    return JsonResponse({
        'success': True,
        'message': 'Status transaksi berhasil diperbarui',
        'data': serialize_transaction(transaction),
    })


@require_POST
@api_login_required
def transaction_bulk_update_status(request):
    """
    Apply one status to many transactions in a single UPDATE

    Ids outside the caller's scope or that do not exist are skipped;
    updated_count reports the rows actually changed. Validator stamps are
    written only when DONATIONS_BULK_STATUS_STAMPS_VALIDATOR is on.
    """
    checker = PermissionChecker(request.user)
    if not checker.can_validate_transactions():
        raise PermissionDenied

    data, _ = parse_request_data(request)
    form = BulkStatusUpdateForm(data)
    if not form.is_valid():
        return form_error_response(form)

    ids = form.cleaned_data['ids']
    status = form.cleaned_data['status']

    transactions = checker.filter_transactions(Transaction.objects.all()).filter(pk__in=ids)

    if settings.DONATIONS_BULK_STATUS_STAMPS_VALIDATOR and status != Transaction.STATUS_PENDING:
        updated_count = transactions.bulk_set_status(status, request.user, timezone.now())
    else:
        updated_count = transactions.bulk_set_status(status)

    logger.info(
        f"Bulk status {status} by user {request.user.pk}: {updated_count} of {len(ids)} updated"
    )

    return JsonResponse({
        'success': True,
        'message': f'{updated_count} transaksi berhasil diperbarui',
        'updated_count': updated_count,
    })
