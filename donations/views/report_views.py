"""
Report Views
============

Branch and volunteer performance reports with .xlsx export.

Window parameters: dateFrom/dateTo or datePreset (current_month,
1_month_back, 2_months_back, all_data). Windows apply to created_at and
every status is counted in the totals.
"""

import logging

from django.core.exceptions import PermissionDenied
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from donations.models import Branch, Team, Transaction, User
from donations.permissions import PermissionChecker, api_login_required
from donations.serializers import serialize_branch
from donations.utils.date_filters import resolve_report_window, window_label
from donations.utils.excel_export import export_branch_report_excel, export_volunteer_report_excel
from donations.utils.reporting import (
    build_branch_report,
    build_volunteer_report,
    build_team_report,
    summarize_rows,
    serialize_rollup,
)


logger = logging.getLogger(__name__)


# =============================================================================
# HELPERS
# =============================================================================

def _report_checker(request):
    checker = PermissionChecker(request.user)
    if not checker.can_view_reports():
        raise PermissionDenied
    return checker


def _report_window(request):
    return resolve_report_window(
        request.GET.get('datePreset'),
        request.GET.get('dateFrom'),
        request.GET.get('dateTo'),
    )


def _scoped_branch_id(request, checker):
    """Branch users are pinned to their own branch"""
    if checker.is_branch():
        return checker.user.branch_id
    return request.GET.get('branch_id') or None


def _window_info(window):
    start, end = window
    return {
        'date_from': start.isoformat() if start else None,
        'date_to': end.isoformat() if end else None,
        'label': window_label(start, end),
    }


def branch_report_rows(request, checker):
    window = _report_window(request)
    branches = checker.filter_branches(Branch.objects.all())
    transactions = checker.filter_transactions(Transaction.objects.all()).created_between(*window)

    rows = build_branch_report(transactions, branches)
    return rows, summarize_rows(rows), window


def volunteer_report_rows(request, checker):
    window = _report_window(request)
    volunteers = User.objects.volunteers().select_related('branch', 'team')
    transactions = checker.filter_transactions(Transaction.objects.all()).created_between(*window)

    branch_id = _scoped_branch_id(request, checker)
    if branch_id:
        volunteers = volunteers.filter(branch_id=branch_id)
        transactions = transactions.filter(branch_id=branch_id)

    rows = build_volunteer_report(transactions, volunteers)
    return rows, summarize_rows(rows), window


# =============================================================================
# REPORTS
# =============================================================================

@require_GET
@api_login_required
def branch_reports(request):
    """Per-branch totals with the branch side of the commission"""
    checker = _report_checker(request)
    rows, totals, window = branch_report_rows(request, checker)

    return JsonResponse({
        'success': True,
        'data': [serialize_rollup(row) for row in rows],
        'totals': serialize_rollup(totals),
        'period': _window_info(window),
    })


@require_GET
@api_login_required
def volunteer_reports(request):
    """Per-volunteer totals with the volunteer side of the commission"""
    checker = _report_checker(request)
    rows, totals, window = volunteer_report_rows(request, checker)

    return JsonResponse({
        'success': True,
        'data': [serialize_rollup(row) for row in rows],
        'totals': serialize_rollup(totals),
        'period': _window_info(window),
    })


@require_GET
@api_login_required
def branch_detail_report(request, branch_id):
    """One branch: team breakdown, volunteer breakdown and overall statistics"""
    checker = _report_checker(request)
    branch = get_object_or_404(checker.filter_branches(Branch.objects.all()), pk=branch_id)

    window = _report_window(request)
    transactions = Transaction.objects.filter(branch=branch).created_between(*window)

    teams = build_team_report(transactions, Team.objects.filter(branch=branch))
    volunteers = build_volunteer_report(
        transactions,
        User.objects.volunteers().filter(branch=branch).select_related('branch', 'team'),
    )
    statistics = build_branch_report(transactions, [branch])[0]

    return JsonResponse({
        'success': True,
        'data': {
            'branch': serialize_branch(branch),
            'statistics': serialize_rollup(statistics),
            'status_counts': transactions.status_counts(),
            'teams': [serialize_rollup(row) for row in teams],
            'volunteers': [serialize_rollup(row) for row in volunteers],
        },
        'period': _window_info(window),
    })


@require_GET
@api_login_required
def summary_report(request):
    """Headline numbers for the reports page"""
    checker = _report_checker(request)
    window = _report_window(request)

    branches = checker.filter_branches(Branch.objects.all())
    volunteers = User.objects.volunteers()
    if checker.is_branch():
        volunteers = volunteers.filter(branch_id=checker.user.branch_id)

    rows, totals, _ = branch_report_rows(request, checker)

    return JsonResponse({
        'success': True,
        'data': {
            'total_branches': branches.count(),
            'total_volunteers': volunteers.count(),
            **serialize_rollup(totals),
        },
        'period': _window_info(window),
    })


# =============================================================================
# EXPORTS
# =============================================================================

@require_GET
@api_login_required
def branch_report_export(request):
    checker = _report_checker(request)
    rows, totals, window = branch_report_rows(request, checker)
    logger.info(f"Branch report export by user {request.user.pk}")
    return export_branch_report_excel(rows, totals, window_label(*window))


@require_GET
@api_login_required
def volunteer_report_export(request):
    checker = _report_checker(request)
    rows, totals, window = volunteer_report_rows(request, checker)
    logger.info(f"Volunteer report export by user {request.user.pk}")
    return export_volunteer_report_excel(rows, totals, window_label(*window))
