"""
Test fixtures
=============

Small builders for the master data every test needs, plus a TestCase
mixin that lays out two branches with one account per role.
"""

import json
from decimal import Decimal

from django.utils import timezone

from donations.models import Branch, Team, User, Program, PaymentMethod, Transaction


PASSWORD = 'rahasia-123'


def make_branch(name='Cabang Jakarta', code='JKT'):
    return Branch.objects.create(name=name, code=code, address='Jl. Merdeka No. 1')


def make_team(branch, name='Tim A', code='JKT-A'):
    return Team.objects.create(name=name, code=code, branch=branch)


def make_user(email, role, name=None, branch=None, team=None):
    return User.objects.create_user(
        email, PASSWORD,
        name=name or email.split('@')[0].title(),
        role=role,
        branch=branch,
        team=team,
    )


def make_program(code, program_type='ZISWAF', name=None, volunteer_rate='15', branch_rate='70'):
    return Program.objects.create(
        code=code,
        type=program_type,
        name=name or code.title(),
        volunteer_rate=Decimal(volunteer_rate),
        branch_rate=Decimal(branch_rate),
    )


def make_payment_method(name='Transfer Bank'):
    return PaymentMethod.objects.create(name=name)


def make_transaction(volunteer, program, payment_method, **fields):
    values = {
        'branch': volunteer.branch,
        'team': volunteer.team,
        'volunteer': volunteer,
        'program_type': program.type,
        'program': program,
        'payment_method': payment_method,
        'donor_name': 'Hamba Allah',
        'transaction_date': timezone.now(),
    }
    if program.type == Program.TYPE_QURBAN:
        values.update(qurban_amount=Decimal('2000000'), qurban_owner_name='Keluarga Fulan')
    else:
        values['amount'] = Decimal('1000000')
    values.update(fields)
    return Transaction.objects.create(**values)


class DonationWorldMixin:
    """
    Two branches, each with a team and a volunteer, plus admin, validator
    and a branch account for the first branch.
    """

    @classmethod
    def setUpTestData(cls):
        cls.branch = make_branch()
        cls.other_branch = make_branch('Cabang Bandung', 'BDG')
        cls.team = make_team(cls.branch)
        cls.other_team = make_team(cls.other_branch, 'Tim B', 'BDG-B')

        cls.admin = make_user('admin@example.com', User.ROLE_ADMIN, 'Admin')
        cls.validator = make_user('validator@example.com', User.ROLE_VALIDATOR, 'Validator')
        cls.branch_user = make_user('cabang@example.com', User.ROLE_BRANCH, 'Admin Jakarta', cls.branch)
        cls.volunteer = make_user('budi@example.com', User.ROLE_VOLUNTEER, 'Budi', cls.branch, cls.team)
        cls.other_volunteer = make_user(
            'sari@example.com', User.ROLE_VOLUNTEER, 'Sari', cls.other_branch, cls.other_team
        )

        cls.zakat = make_program('ZAKAT', 'ZISWAF', 'Zakat Maal', '15', '70')
        cls.infaq = make_program('INFAQ', 'ZISWAF', 'Infaq Umum', '15', '5')
        cls.qurban = make_program('QKB', 'QURBAN', 'Qurban Kambing', '10', '5')
        cls.payment_method = make_payment_method()

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')

    def put_json(self, url, payload):
        return self.client.put(url, data=json.dumps(payload), content_type='application/json')
