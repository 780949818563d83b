from django.core.management.base import BaseCommand
from django.db.models import Count

from storefront.catalog.models import Product


class Command(BaseCommand):
    help = 'List products with category, brand, price and tags, followed by per-category counts'

    def handle(self, *args, **options):
        products = Product.objects.select_related('category').order_by('created_at')
        total = products.count()
        self.stdout.write(f'\nTotal Products: {total}\n')

        if not total:
            self.stdout.write(self.style.WARNING('No products found in the database'))
            return

        for index, product in enumerate(products, start=1):
            self.stdout.write(f'{index}. {product.name}')
            self.stdout.write(f'   Category: {product.category_name or "N/A"}')
            self.stdout.write(f'   Brand: {product.brand or "N/A"}')
            self.stdout.write(f'   Price: ₹{product.price}')
            self.stdout.write(f'   Stock: {product.stock_quantity}')
            self.stdout.write(f'   Tags: {", ".join(product.tags) if product.tags else "N/A"}')
            self.stdout.write(f'   Added: {product.created_at:%Y-%m-%d}')

        self.stdout.write(self.style.SUCCESS('\nProducts by Category:'))
        rows = (
            Product.objects.values('category__name')
            .annotate(count=Count('id'))
            .order_by('category__name')
        )
        for row in rows:
            self.stdout.write(f"{row['category__name'] or 'Uncategorized'}: {row['count']} products")
