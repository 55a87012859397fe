"""
Report Rollups
==============

Per-branch, per-volunteer and per-team rollups over a transaction
queryset. Rows are folded in Python from a single values() query so the
commission rule in donations.utils.commission is the only place
commissions are computed.
"""

from decimal import Decimal

from donations.managers import REJECTED_STATUSES
from donations.utils.commission import calculate_commission
from donations.utils.money import to_decimal


ROLLUP_FIELDS = [
    'branch_id', 'team_id', 'volunteer_id', 'status', 'program_type',
    'amount', 'qurban_amount', 'ziswaf_program_id',
    'volunteer_rate', 'branch_rate', 'ziswaf_volunteer_rate', 'ziswaf_branch_rate',
]


def empty_rollup():
    return {
        'total_donations': Decimal('0'),
        'total_ziswaf': Decimal('0'),
        'total_qurban': Decimal('0'),
        'total_commission': Decimal('0'),
        'total_transactions': 0,
        'validated_transactions': 0,
        'pending_transactions': 0,
        'rejected_transactions': 0,
    }


def add_to_rollup(rollup, row, commission_side):
    """Fold one transaction values() row into a rollup dict"""
    amount = to_decimal(row['amount'])
    qurban_amount = to_decimal(row['qurban_amount'])

    rollup['total_donations'] += amount + qurban_amount
    rollup['total_ziswaf'] += amount
    rollup['total_qurban'] += qurban_amount
    rollup['total_commission'] += calculate_commission(row)[commission_side]
    rollup['total_transactions'] += 1

    if row['status'] == 'valid':
        rollup['validated_transactions'] += 1
    elif row['status'] == 'pending':
        rollup['pending_transactions'] += 1
    elif row['status'] in REJECTED_STATUSES:
        rollup['rejected_transactions'] += 1


def rollup_by(transactions, key, commission_side):
    """{key value: rollup} for the transactions queryset"""
    rollups = {}
    for row in transactions.order_by().values(*ROLLUP_FIELDS):
        rollup = rollups.setdefault(row[key], empty_rollup())
        add_to_rollup(rollup, row, commission_side)
    return rollups


def _sorted(rows):
    return sorted(rows, key=lambda row: (-row['total_donations'], row['name'].lower()))


def build_branch_report(transactions, branches):
    """
    One row per branch, zero-filled, sorted by total donations desc

    total_commission is the branch side of the commission rule.
    """
    rollups = rollup_by(transactions, 'branch_id', 'branch_commission')
    rows = []
    for branch in branches:
        row = {'id': str(branch.pk), 'name': branch.name, 'code': branch.code}
        row.update(rollups.get(branch.pk, empty_rollup()))
        rows.append(row)
    return _sorted(rows)


def build_volunteer_report(transactions, volunteers):
    """
    One row per volunteer, zero-filled, sorted by total donations desc

    total_commission is the volunteer side of the commission rule.
    """
    rollups = rollup_by(transactions, 'volunteer_id', 'volunteer_commission')
    rows = []
    for volunteer in volunteers:
        row = {
            'id': volunteer.pk,
            'name': volunteer.name,
            'team_name': volunteer.team.name if volunteer.team_id else '-',
            'branch_name': volunteer.branch.name if volunteer.branch_id else '-',
        }
        row.update(rollups.get(volunteer.pk, empty_rollup()))
        rows.append(row)
    return _sorted(rows)


def build_team_report(transactions, teams):
    rollups = rollup_by(transactions, 'team_id', 'branch_commission')
    rows = []
    for team in teams:
        row = {'id': str(team.pk), 'name': team.name, 'code': team.code}
        row.update(rollups.get(team.pk, empty_rollup()))
        rows.append(row)
    return _sorted(rows)


def summarize_rows(rows):
    """Column totals over report rows"""
    totals = empty_rollup()
    for row in rows:
        for key in totals:
            totals[key] += row[key]
    return totals


def serialize_rollup(row):
    """Decimal values as strings for JSON"""
    return {
        key: str(value) if isinstance(value, Decimal) else value
        for key, value in row.items()
    }
