"""
Management command to load the seed supplement catalogue
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from storefront.catalog.models import Category, Product
from storefront.catalog.seed_data import CATEGORIES, PRODUCT_GROUPS
from storefront.core.cache_signals import suspend_cache_signals, invalidate_all
from storefront.core.utils import slugify_name


class Command(BaseCommand):
    help = 'Adds seed products (whey, mass gainers, pre-workouts, vitamins); existing names are skipped'

    def add_arguments(self, parser):
        parser.add_argument(
            '--group',
            default='all',
            choices=sorted(PRODUCT_GROUPS) + ['all'],
            help='Product group to load (default: all)',
        )

    def _get_category(self, name):
        category = Category.objects.filter(name__iexact=name).first()
        if category:
            return category
        seed = next((c for c in CATEGORIES if c['name'] == name), None)
        category = Category.objects.create(
            name=name,
            slug=seed['slug'] if seed else slugify_name(name),
            description=seed['description'] if seed else '',
            image=seed['image'] if seed else '',
            sort_order=seed['sort_order'] if seed else 0,
        )
        self.stdout.write(f"  + Created missing category: {name}")
        return category

    def handle(self, *args, **options):
        group = options['group']
        groups = PRODUCT_GROUPS if group == 'all' else {group: PRODUCT_GROUPS.get(group)}
        if any(products is None for products in groups.values()):
            raise CommandError(f"Unknown product group: {group}")

        created_count = 0
        skipped_count = 0

        with transaction.atomic(), suspend_cache_signals():
            for group_name, products in groups.items():
                self.stdout.write(self.style.SUCCESS(f"\nAdding {group_name} products..."))
                for data in products:
                    if Product.objects.filter(name=data['name']).exists():
                        skipped_count += 1
                        self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {data['name']}"))
                        continue

                    fields = dict(data)
                    fields['category'] = self._get_category(fields.pop('category'))
                    product = Product.objects.create(**fields)
                    created_count += 1
                    self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {product.name} ({product.sku}) ₹{product.price}"))
        invalidate_all()

        self.stdout.write(self.style.SUCCESS(
            f'\nCompleted: {created_count} products created, {skipped_count} skipped'
        ))
