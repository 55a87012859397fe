"""
Commission Calculation
======================

One pure rule for volunteer/branch commission, used by the API serializers,
reports and Excel exports alike.

Rates are percentages in [0, 100] snapshotted on the transaction. Nothing
is rounded here; rounding happens when amounts are formatted for display.

    ZISWAF:            amount * (ziswaf_rate ?? rate ?? 0) / 100
    QURBAN:            qurban_amount * rate / 100
    QURBAN + ZISWAF:   qurban_amount * rate / 100 + amount * ziswaf_rate / 100
"""

from decimal import Decimal

from donations.utils.money import to_decimal

HUNDRED = Decimal('100')


def _get(transaction, name):
    """Read a field from a model instance or a values() dict"""
    if isinstance(transaction, dict):
        return transaction.get(name)
    return getattr(transaction, name, None)


def _has_ziswaf_program(transaction):
    if isinstance(transaction, dict):
        return transaction.get('ziswaf_program_id') is not None
    return getattr(transaction, 'ziswaf_program_id', None) is not None


def _first_set(*values):
    for value in values:
        if value is not None:
            return value
    return 0


def percent_of(amount, rate):
    return to_decimal(amount) * to_decimal(rate) / HUNDRED


def calculate_commission(transaction):
    """
    Compute volunteer and branch commission for a transaction

    Args:
        transaction: Transaction instance or a dict with the same field names

    Returns:
        dict: {'volunteer_commission': Decimal, 'branch_commission': Decimal}
    """
    program_type = _get(transaction, 'program_type')
    amount = _get(transaction, 'amount')
    qurban_amount = _get(transaction, 'qurban_amount')
    volunteer_rate = _get(transaction, 'volunteer_rate')
    branch_rate = _get(transaction, 'branch_rate')
    ziswaf_volunteer_rate = _get(transaction, 'ziswaf_volunteer_rate')
    ziswaf_branch_rate = _get(transaction, 'ziswaf_branch_rate')

    if program_type == 'QURBAN':
        volunteer = percent_of(qurban_amount, volunteer_rate)
        branch = percent_of(qurban_amount, branch_rate)
        if _has_ziswaf_program(transaction):
            volunteer += percent_of(amount, ziswaf_volunteer_rate)
            branch += percent_of(amount, ziswaf_branch_rate)
    else:
        volunteer = percent_of(amount, _first_set(ziswaf_volunteer_rate, volunteer_rate))
        branch = percent_of(amount, _first_set(ziswaf_branch_rate, branch_rate))

    return {
        'volunteer_commission': volunteer,
        'branch_commission': branch,
    }


def calculate_total_amount(transaction):
    """amount + qurban_amount, treating missing values as zero"""
    return to_decimal(_get(transaction, 'amount')) + to_decimal(_get(transaction, 'qurban_amount'))
