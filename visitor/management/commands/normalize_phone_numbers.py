from django.core.management.base import BaseCommand
from vms.utils.phone_utils import migrate_existing_phone_numbers


class Command(BaseCommand):
    help = 'Re-normalize stored visitor phone numbers'

    def add_arguments(self, parser):
        parser.add_argument(
            '--app-label',
            type=str,
            default='visitor',
            help='App label (default: visitor)'
        )
        parser.add_argument(
            '--model-name',
            type=str,
            default='Visitor',
            help='Model name (default: Visitor)'
        )
        parser.add_argument(
            '--field-name',
            type=str,
            default='phone_number',
            help='Field name (default: phone_number)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be changed without making actual changes'
        )

    def handle(self, *args, **options):
        app_label = options['app_label']
        model_name = options['model_name']
        field_name = options['field_name']
        dry_run = options['dry_run']

        self.stdout.write(
            self.style.SUCCESS(
                f'Normalizing phone numbers for {app_label}.{model_name}.{field_name}'
            )
        )
        if dry_run:
            self.stdout.write(self.style.WARNING('DRY RUN MODE - No changes will be made'))

        stats = migrate_existing_phone_numbers(app_label, model_name, field_name, dry_run=dry_run)

        if 'error' in stats:
            self.stdout.write(self.style.ERROR(f'Normalization failed: {stats["error"]}'))
            return

        verb = 'Would change' if dry_run else 'Changed'
        for pk, old, new in stats['changes']:
            self.stdout.write(f'  {verb}: {old} -> {new} (ID: {pk})')

        self.stdout.write(f'  Total records: {stats["total"]}')
        if dry_run:
            self.stdout.write(
                self.style.SUCCESS(f'  Would normalize: {len(stats["changes"])}')
            )
        else:
            self.stdout.write(
                self.style.SUCCESS(f'  Normalized: {stats["normalized"]}')
            )

        if stats['failed'] > 0:
            self.stdout.write(
                self.style.WARNING(f'  Failed: {stats["failed"]}')
            )
            for failed in stats['failed_numbers']:
                self.stdout.write(
                    self.style.ERROR(
                        f'    ID {failed["id"]}: {failed["number"]} - {failed["error"]}'
                    )
                )
