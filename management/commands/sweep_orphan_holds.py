"""
Management command to release holds left behind by a stopped shop process.

Usage:
    python manage.py sweep_orphan_holds
    python manage.py sweep_orphan_holds --dry-run

Runs with an empty live set: every HELD item is treated as orphaned.
Only run it while the shop process is stopped; a running shop repairs
its own holds on start and through the reconcile endpoint.
"""

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand

from tillman.adapters.loader import load_backend
from tillman.models import ItemStatus
from tillman.records import STOCK
from tillman.services import StockLedger


class Command(BaseCommand):
    """Release orphaned holds command."""

    help = 'Releases HELD stock items back to available (shop must be stopped)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show how many items would be released without changing them'
        )

    def handle(self, *args, **options):
        store = load_backend('ROW_STORE')

        if options['dry_run']:
            held = async_to_sync(store.list_rows)(
                STOCK, lambda row: row.get('status') == ItemStatus.HELD
            )
            self.stdout.write(f'{len(held)} held item(s) would be released')
            return

        result = async_to_sync(StockLedger(store).sweep_orphans)(set())
        self.stdout.write(
            self.style.SUCCESS(f'{result.released} held item(s) released')
        )
        if result.failed:
            self.stderr.write(
                self.style.WARNING(f'{result.failed} item(s) could not be released')
            )
