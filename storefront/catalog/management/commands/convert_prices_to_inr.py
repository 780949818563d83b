from decimal import Decimal, ROUND_HALF_UP

from django.core.management.base import BaseCommand
from django.db import transaction

from storefront.catalog.models import Product
from storefront.catalog.seed_data import INR_PRICE_TABLE, USD_TO_INR_RATE
from storefront.core.cache_signals import suspend_cache_signals, invalidate_all


def to_inr(amount):
    return (Decimal(amount) * USD_TO_INR_RATE).quantize(Decimal('1'), rounding=ROUND_HALF_UP)


class Command(BaseCommand):
    help = 'Convert USD product and variant prices to INR using market prices or the fixed rate'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show new prices without saving them',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        products = Product.objects.prefetch_related('variants').order_by('id')
        self.stdout.write(f'Found {products.count()} products to convert')

        with transaction.atomic(), suspend_cache_signals():
            for product in products:
                table_prices = INR_PRICE_TABLE.get(product.name)
                if table_prices:
                    new_price, new_original = table_prices
                else:
                    new_price = to_inr(product.price)
                    new_original = to_inr(product.original_price) if product.original_price else None

                self.stdout.write(f'  {product.name}: ${product.price} → ₹{new_price}')
                if dry_run:
                    continue

                product.price = new_price
                if new_original:
                    product.original_price = new_original
                product.save(update_fields=['price', 'original_price', 'updated_at'])

                for variant in product.variants.all():
                    variant.price = new_price if table_prices else to_inr(variant.price)
                    variant.save(update_fields=['price'])
        if not dry_run:
            invalidate_all()

        if dry_run:
            self.stdout.write(self.style.WARNING('\n[DRY RUN] No prices were changed'))
        else:
            self.stdout.write(self.style.SUCCESS('\nAll products converted to INR'))
