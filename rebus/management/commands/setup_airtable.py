import logging
import time

from django.core.exceptions import ImproperlyConfigured
from django.core.management.base import BaseCommand, CommandError

from core.airtable import AirtableError
from rebus.progress import field_definitions, progress_table

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Create the rebus progress columns in the Airtable progress table, skipping existing ones.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--delay', type=float, default=0.25,
            help='Seconds to wait between field creations (Airtable allows 5 requests/s).',
        )

    def handle(self, *args, **options):
        try:
            table = progress_table()
        except ImproperlyConfigured as e:
            raise CommandError(f'{e}: set AIRTABLE_TOKEN, AIRTABLE_BASE_ID and AIRTABLE_TABLE_ID')

        self.stdout.write(f'Table: {table.table_id}')
        try:
            existing = {f.get('name') for f in table.schema_fields()}
        except AirtableError as e:
            raise CommandError(f'Could not read table schema: {e}')
        self.stdout.write(f'Found {len(existing)} existing fields')

        created = skipped = failed = 0
        for definition in field_definitions():
            name = definition['name']
            if name in existing:
                self.stdout.write(f'  {name}: exists, skipped')
                skipped += 1
                continue
            try:
                table.create_field(definition)
            except AirtableError as e:
                logger.error('Could not create field %s: %s', name, e)
                self.stderr.write(f'  {name}: failed ({e.message})')
                failed += 1
                continue
            self.stdout.write(self.style.SUCCESS(f'  {name}: created'))
            created += 1
            if options['delay'] > 0:
                time.sleep(options['delay'])

        self.stdout.write(f'Created {created}, skipped {skipped}, failed {failed}')
        if failed:
            raise CommandError(f'{failed} field(s) could not be created')
