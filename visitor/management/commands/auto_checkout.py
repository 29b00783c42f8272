from django.core.management.base import BaseCommand
from visitor.tasks import auto_checkout_active_visits


class Command(BaseCommand):
    help = 'Check out every active visit now (same as the midnight auto-checkout)'

    def handle(self, *args, **options):
        result = auto_checkout_active_visits()

        if result['status'] != 'success':
            self.stdout.write(self.style.ERROR(f'Auto-checkout failed: {result["reason"]}'))
            return

        self.stdout.write(
            self.style.SUCCESS(f'Checked out {result["checked_out"]} active visits')
        )
