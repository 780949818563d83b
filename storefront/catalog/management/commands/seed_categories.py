"""
Management command to add the storefront categories to the database
"""
from django.core.management.base import BaseCommand

from storefront.catalog.models import Category
from storefront.catalog.seed_data import CATEGORIES


class Command(BaseCommand):
    help = "Adds the storefront product categories to the database"

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear all existing categories before adding new ones',
        )

    def handle(self, *args, **options):
        self.stdout.write(self.style.SUCCESS("=" * 60))
        self.stdout.write(self.style.SUCCESS("SEEDING PRODUCT CATEGORIES"))
        self.stdout.write(self.style.SUCCESS("=" * 60))

        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing all existing categories..."))
            Category.objects.all().delete()

        created_count = 0
        skipped_count = 0

        for data in CATEGORIES:
            category, created = Category.objects.get_or_create(
                name=data['name'],
                defaults={
                    'slug': data['slug'],
                    'description': data['description'],
                    'image': data['image'],
                    'sort_order': data['sort_order'],
                    'is_active': True,
                }
            )
            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {category.name} ({category.slug})"))
            else:
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {category.name}"))

        self.stdout.write(f"\nCategories Created: {created_count}")
        self.stdout.write(f"Categories Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Categories in Database: {Category.objects.count()}")
