"""
Fill missing commission-rate snapshots on existing transactions

Only NULL snapshot fields are written, from the program's current rates.
A snapshot that already exists is never overwritten.

Usage:
    python manage.py backfill_transaction_rates
    python manage.py backfill_transaction_rates --dry-run
"""

import logging

from django.core.management.base import BaseCommand
from django.db import transaction

from donations.models import Transaction


logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Fill missing commission-rate snapshots from the current program rates'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report how many transactions would change without writing',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        dry_run = options['dry_run']
        pending = Transaction.objects.missing_rate_snapshots().select_related('program', 'ziswaf_program')

        if dry_run:
            count = pending.count()
            self.stdout.write(self.style.WARNING(f'{count} transaction(s) have missing rate snapshots'))
            return

        updated = 0
        for item in pending.iterator():
            changed = self.fill_missing(item)
            if changed:
                item.save(update_fields=changed)
                updated += 1

        logger.info(f"Backfilled rate snapshots on {updated} transaction(s)")
        self.stdout.write(self.style.SUCCESS(f'[SUCCESS] Backfilled {updated} transaction(s)'))

    def fill_missing(self, item):
        """Set the NULL snapshot fields; returns the names that changed"""
        changed = []

        if item.volunteer_rate is None:
            item.volunteer_rate = item.program.volunteer_rate
            changed.append('volunteer_rate')
        if item.branch_rate is None:
            item.branch_rate = item.program.branch_rate
            changed.append('branch_rate')

        if item.ziswaf_program_id:
            if item.ziswaf_volunteer_rate is None:
                item.ziswaf_volunteer_rate = item.ziswaf_program.volunteer_rate
                changed.append('ziswaf_volunteer_rate')
            if item.ziswaf_branch_rate is None:
                item.ziswaf_branch_rate = item.ziswaf_program.branch_rate
                changed.append('ziswaf_branch_rate')

        return changed
