import time

from django.core.management.base import BaseCommand

from storefront.cart.services import process_wishlist_restocks


class Command(BaseCommand):
    help = 'Check wishlisted products for restocks, auto-add them to carts and send restock e-mails'

    def add_arguments(self, parser):
        parser.add_argument(
            '--loop',
            action='store_true',
            help='Keep running, checking every --interval seconds',
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=300,
            help='Seconds between checks in --loop mode (default: 300)',
        )

    def run_once(self):
        summary = process_wishlist_restocks()
        self.stdout.write(
            f"Restocked: {summary['restocked']}, added to cart: {summary['added_to_cart']}, "
            f"notified: {summary['notified']}, newly out of stock: {summary['flagged']}, "
            f"failed: {summary['failed']}"
        )

    def handle(self, *args, **options):
        if not options['loop']:
            self.run_once()
            return

        interval = max(options['interval'], 1)
        self.stdout.write(self.style.SUCCESS(f'Starting wishlist stock monitor (every {interval}s)'))
        try:
            while True:
                self.run_once()
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write(self.style.WARNING('\nStopping wishlist stock monitor'))
