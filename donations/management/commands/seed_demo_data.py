"""
Seed a local database with demo master data

Creates programs, payment methods, one branch with one team and one
account per role. Existing records (matched by code / email) are left
untouched, so the command can be re-run safely.

Usage:
    python manage.py seed_demo_data
    python manage.py seed_demo_data --password secret123
"""

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from donations.models import Branch, Team, User, Program, PaymentMethod, AppSetting


PROGRAMS = [
    ('ZISWAF', 'ZKT', 'Zakat', Decimal('10.00'), Decimal('5.00')),
    ('ZISWAF', 'INF', 'Infaq', Decimal('15.00'), Decimal('5.00')),
    ('ZISWAF', 'WKF', 'Wakaf', Decimal('10.00'), Decimal('5.00')),
    ('QURBAN', 'QKB', 'Qurban Kambing', Decimal('5.00'), Decimal('2.50')),
    ('QURBAN', 'QSP', 'Qurban Sapi', Decimal('5.00'), Decimal('2.50')),
]

PAYMENT_METHODS = ['Transfer Bank', 'Tunai', 'QRIS']


class Command(BaseCommand):
    help = 'Create demo programs, payment methods, a branch, a team and one user per role'

    def add_arguments(self, parser):
        parser.add_argument(
            '--password',
            default='password',
            help='Password for the demo accounts',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options['password']

        self.stdout.write(self.style.SUCCESS('\n=== Seeding demo data ===\n'))

        for program_type, code, name, volunteer_rate, branch_rate in PROGRAMS:
            _, created = Program.objects.get_or_create(
                code=code,
                defaults={
                    'type': program_type,
                    'name': name,
                    'volunteer_rate': volunteer_rate,
                    'branch_rate': branch_rate,
                },
            )
            self.report('Program', name, created)

        for name in PAYMENT_METHODS:
            _, created = PaymentMethod.objects.get_or_create(name=name)
            self.report('Payment method', name, created)

        branch, created = Branch.objects.get_or_create(
            code='CBG-01', defaults={'name': 'Cabang Pusat', 'address': 'Jakarta'}
        )
        self.report('Branch', branch.name, created)

        team, created = Team.objects.get_or_create(
            code='TIM-01', defaults={'name': 'Tim Satu', 'branch': branch}
        )
        self.report('Team', team.name, created)

        accounts = [
            ('admin@example.com', 'Administrator', User.ROLE_ADMIN, None, None),
            ('validator@example.com', 'Validator', User.ROLE_VALIDATOR, None, None),
            ('cabang@example.com', 'Admin Cabang', User.ROLE_BRANCH, branch, None),
            ('relawan@example.com', 'Relawan Satu', User.ROLE_VOLUNTEER, branch, team),
        ]
        for email, name, role, user_branch, user_team in accounts:
            if User.objects.filter(email=email).exists():
                self.report('User', email, False)
                continue
            create = User.objects.create_superuser if role == User.ROLE_ADMIN else User.objects.create_user
            create(email, password, name=name, role=role, branch=user_branch, team=user_team)
            self.report('User', email, True)

        AppSetting.load()

        self.stdout.write(self.style.SUCCESS('\n[SUCCESS] Demo data ready\n'))

    def report(self, kind, label, created):
        if created:
            self.stdout.write(f'  [+] {kind}: {label}')
        else:
            self.stdout.write(f'  [=] {kind} exists: {label}')
