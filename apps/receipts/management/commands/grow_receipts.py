"""
Management command to append receipts to an existing pool.

Numbering continues after the highest existing receipt number.

Usage:
    python manage.py grow_receipts --count 20
"""

from django.core.management.base import BaseCommand, CommandError
from apps.receipts.services import grow_pool, InvalidCountError, ReceiptStoreError


class Command(BaseCommand):
    help = 'Append unissued receipts after the highest existing number'

    def add_arguments(self, parser):
        parser.add_argument(
            '--count',
            type=int,
            required=True,
            help='Number of receipts to add',
        )

    def handle(self, *args, **options):
        try:
            receipts = grow_pool(count=options['count'])
        except (InvalidCountError, ReceiptStoreError) as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                f'Added {len(receipts)} receipt(s): '
                f'{receipts[0].display_id} to {receipts[-1].display_id}'
            )
        )
