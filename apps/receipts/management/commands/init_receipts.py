"""
Management command to create the initial receipt pool.

Usage:
    python manage.py init_receipts
    python manage.py init_receipts --size 150
"""

from django.core.management.base import BaseCommand, CommandError
from apps.receipts.services import (
    initialize_pool,
    AlreadyInitializedError,
    InvalidCountError,
    ReceiptStoreError,
)


class Command(BaseCommand):
    help = 'Create the initial pool of unissued receipts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--size',
            type=int,
            default=None,
            help='Number of receipts to create (defaults to RECEIPTS_DEFAULT_POOL_SIZE)',
        )

    def handle(self, *args, **options):
        try:
            receipts = initialize_pool(size=options['size'])
        except AlreadyInitializedError as e:
            self.stdout.write(self.style.WARNING(str(e)))
            return
        except (InvalidCountError, ReceiptStoreError) as e:
            raise CommandError(str(e)) from e

        self.stdout.write(
            self.style.SUCCESS(
                f'Created {len(receipts)} receipt(s): '
                f'{receipts[0].display_id} to {receipts[-1].display_id}'
            )
        )
