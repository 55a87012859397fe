"""
Dashboard View
==============

Role-scoped statistics over transactions for a date window:

- transaction totals and status counts
- user counts by role
- per-branch / per-program / top-volunteer performance (valid only)
- 6-month trend overall and per program (valid only)
- 10 most recent transactions

Date windows apply to created_at. Read-only.
"""

from django.core.exceptions import PermissionDenied
from django.db.models import Count, Q
from django.http import JsonResponse
from django.views.decorators.http import require_GET

from donations.managers import money_sum, donation_total_expression
from donations.models import Branch, Program, Transaction, User
from donations.permissions import PermissionChecker, api_login_required
from donations.utils.date_filters import (
    resolve_dashboard_window,
    short_month_label,
    trailing_months,
)
from donations.utils.money import MoneyCalculator


UNKNOWN = 'Unknown'


def _str(value):
    return str(value) if value is not None else '0'


def apply_dashboard_filters(transactions, params):
    """branch_id, team_id, volunteer_id (id or exact name), program_name"""
    if params.get('branch_id'):
        transactions = transactions.filter(branch_id=params['branch_id'])
    if params.get('team_id'):
        transactions = transactions.filter(team_id=params['team_id'])

    volunteer = params.get('volunteer_id')
    if volunteer:
        if str(volunteer).isdigit():
            transactions = transactions.filter(volunteer_id=int(volunteer))
        else:
            transactions = transactions.filter(volunteer__name=volunteer)

    if params.get('program_name'):
        transactions = transactions.filter(program__name=params['program_name'])
    return transactions


# =============================================================================
# SECTIONS
# =============================================================================

def transaction_stats(transactions):
    counts = transactions.status_counts()
    totals = transactions.valid_totals()
    total = sum(counts.values())
    valid = counts['valid']
    rejected = sum(counts[status] for status in Transaction.REJECTED_STATUSES)

    breakdown = {}
    for row in transactions.order_by().values('status').annotate(
        count=Count('id'), total_amount=money_sum(donation_total_expression())
    ):
        breakdown[row['status']] = {
            'status': row['status'],
            'count': row['count'],
            'total_amount': _str(row['total_amount']),
        }

    return {
        'total_transactions': total,
        'total_amount': _str(totals['total_amount']),
        'ziswaf_amount': _str(totals['ziswaf_amount']),
        'qurban_amount': _str(totals['qurban_amount']),
        'valid_transactions': valid,
        'pending_transactions': counts['pending'],
        'rejected_transactions': rejected,
        'validation_rate': MoneyCalculator.safe_percentage(valid, total),
        'status_breakdown': breakdown,
    }


def user_stats():
    by_role = User.objects.count_by_role()
    return {
        'total_users': sum(by_role.values()),
        'active_volunteers': User.objects.volunteers().filter(is_active=True).count(),
        'by_role': by_role,
    }


def branch_stats(valid_transactions):
    performance = []
    rows = (
        valid_transactions.order_by()
        .values('branch_id', 'branch__name')
        .annotate(transaction_count=Count('id'), total_amount=money_sum(donation_total_expression()))
        .order_by('-total_amount')
    )
    for row in rows:
        performance.append({
            'branch_id': _str(row['branch_id']),
            'branch_name': row['branch__name'] or UNKNOWN,
            'transaction_count': row['transaction_count'],
            'total_amount': _str(row['total_amount']),
        })
    return {
        'total_branches': Branch.objects.count(),
        'branch_performance': performance,
    }


def program_stats(valid_transactions):
    performance = []
    rows = (
        valid_transactions.order_by()
        .values('program_id', 'program__name', 'program__type')
        .annotate(transaction_count=Count('id'), total_amount=money_sum(donation_total_expression()))
        .order_by('-total_amount')
    )
    for row in rows:
        performance.append({
            'program_id': _str(row['program_id']),
            'program_name': row['program__name'] or UNKNOWN,
            'program_type': row['program__type'],
            'transaction_count': row['transaction_count'],
            'total_amount': _str(row['total_amount']),
        })
    return {
        'total_programs': Program.objects.count(),
        'program_performance': performance,
    }


def top_volunteers(valid_transactions, limit=5):
    rows = (
        valid_transactions.order_by()
        .values('volunteer_id', 'volunteer__name')
        .annotate(
            transaction_count=Count('id'),
            total_amount=money_sum(donation_total_expression()),
            ziswaf_amount=money_sum('amount'),
            qurban_amount=money_sum('qurban_amount', filter=Q(program_type='QURBAN')),
        )
        .order_by('-total_amount')[:limit]
    )
    return [
        {
            'volunteer_id': row['volunteer_id'],
            'volunteer_name': row['volunteer__name'] or UNKNOWN,
            'transaction_count': row['transaction_count'],
            'total_amount': _str(row['total_amount']),
            'ziswaf_amount': _str(row['ziswaf_amount']),
            'qurban_amount': _str(row['qurban_amount']),
        }
        for row in rows
    ]


def monthly_trend(valid_transactions, months=None):
    """Exactly six points, oldest first, empty months zero-filled"""
    trend = []
    for start, end in months or trailing_months(6):
        totals = valid_transactions.created_between(start, end).aggregate(
            transaction_count=Count('id'),
            total_amount=money_sum(donation_total_expression()),
            ziswaf_amount=money_sum('amount'),
            qurban_amount=money_sum('qurban_amount', filter=Q(program_type='QURBAN')),
        )
        trend.append({
            'month': short_month_label(start),
            'year': start.year,
            'month_number': start.month,
            'transaction_count': totals['transaction_count'],
            'total_amount': _str(totals['total_amount']),
            'ziswaf_amount': _str(totals['ziswaf_amount']),
            'qurban_amount': _str(totals['qurban_amount']),
        })
    return trend


def program_trend(valid_transactions, months=None):
    """Per program with at least one valid transaction: six zero-filled monthly points"""
    months = months or trailing_months(6)
    window = valid_transactions.created_between(months[0][0], months[-1][1])

    program_ids = window.order_by().values_list('program_id', flat=True).distinct()
    programs = Program.objects.filter(pk__in=list(program_ids)).order_by('type', 'name')

    trend = []
    for program in programs:
        program_transactions = window.filter(program=program)
        monthly_data = []
        for start, end in months:
            totals = program_transactions.created_between(start, end).aggregate(
                transaction_count=Count('id'),
                total_amount=money_sum(donation_total_expression()),
            )
            monthly_data.append({
                'month': short_month_label(start),
                'transaction_count': totals['transaction_count'],
                'total_amount': _str(totals['total_amount']),
            })
        trend.append({
            'program_id': str(program.pk),
            'program_name': program.name,
            'program_type': program.type,
            'monthly_data': monthly_data,
        })
    return trend


def recent_transactions(transactions, limit=10):
    recent = transactions.with_related().order_by('-created_at')[:limit]
    return [
        {
            'id': str(transaction.pk),
            'donor_name': transaction.donor_name,
            'amount': _str(transaction.total_amount),
            'program_type': transaction.program_type,
            'status': transaction.status,
            'branch_name': transaction.branch.name if transaction.branch_id else UNKNOWN,
            'team_name': transaction.team.name if transaction.team_id else UNKNOWN,
            'program_name': transaction.program.name if transaction.program_id else UNKNOWN,
            'volunteer_name': transaction.volunteer.name if transaction.volunteer_id else UNKNOWN,
            'created_at': transaction.created_at.isoformat(),
        }
        for transaction in recent
    ]


# =============================================================================
# VIEW
# =============================================================================

@require_GET
@api_login_required
def dashboard_view(request):
    """
    Dashboard statistics

    Query: filter_type, start_date, end_date, branch_id, team_id,
    volunteer_id, program_name.

    - Admin/Validator: all transactions
    - Branch: own branch
    - Volunteer: own transactions
    """
    checker = PermissionChecker(request.user)
    if not checker.can_view_dashboard():
        raise PermissionDenied

    filter_type = request.GET.get('filter_type') or 'current_month'
    date_start, date_end = resolve_dashboard_window(
        filter_type, request.GET.get('start_date'), request.GET.get('end_date')
    )

    scoped = apply_dashboard_filters(
        checker.filter_transactions(Transaction.objects.all()), request.GET
    )
    in_window = scoped.created_between(date_start, date_end)
    valid_in_window = in_window.valid()

    data = {
        'transaction_stats': transaction_stats(in_window),
        'user_stats': user_stats(),
        'branch_stats': branch_stats(valid_in_window),
        'program_stats': program_stats(valid_in_window),
        'volunteer_stats': {'top_volunteers': top_volunteers(valid_in_window)},
        'monthly_trend': monthly_trend(scoped.valid()),
        'program_trend': program_trend(scoped.valid()),
        'recent_transactions': recent_transactions(in_window),
        'filter_info': {
            'filter_type': filter_type,
            'date_start': date_start.isoformat() if date_start else None,
            'date_end': date_end.isoformat() if date_end else None,
        },
    }

    return JsonResponse({'success': True, 'data': data})
