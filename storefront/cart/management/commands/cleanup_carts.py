from django.core.management.base import BaseCommand

from storefront.cart.services import cleanup_old_carts


class Command(BaseCommand):
    help = 'Delete carts that have not been updated recently'

    def add_arguments(self, parser):
        parser.add_argument(
            '--max-age-hours',
            type=int,
            default=24,
            help='Delete carts idle for longer than this many hours (default: 24)',
        )

    def handle(self, *args, **options):
        max_age = options['max_age_hours']
        deleted = cleanup_old_carts(max_age)
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} carts idle for more than {max_age} hours'))
