from pathlib import Path

from django.conf import settings
from django.core.management.base import BaseCommand

from storefront.catalog.models import Product


def is_remote(image_path):
    return image_path.startswith(('http://', 'https://', '//'))


def local_image_exists(image_path, public_dir):
    return (Path(public_dir) / image_path.lstrip('/')).exists()


class Command(BaseCommand):
    help = 'Replace product image paths that do not exist under the public directory with the placeholder image'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report invalid paths without saving changes',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        public_dir = settings.STOREFRONT_PUBLIC_DIR
        placeholder = settings.STOREFRONT_PLACEHOLDER_IMAGE

        products = Product.objects.all().order_by('id')
        self.stdout.write(f'Found {products.count()} products (public dir: {public_dir})')

        fixed_count = 0
        for product in products:
            updated_images = []
            needs_update = False
            for image_path in product.images or []:
                if not isinstance(image_path, str) or not image_path:
                    updated_images.append(placeholder)
                    needs_update = True
                elif is_remote(image_path) or local_image_exists(image_path, public_dir):
                    updated_images.append(image_path)
                else:
                    self.stdout.write(f'  Invalid image path for {product.name}: {image_path}')
                    updated_images.append(placeholder)
                    needs_update = True

            if needs_update:
                fixed_count += 1
                if not dry_run:
                    product.images = updated_images
                    product.save(update_fields=['images', 'updated_at'])
                self.stdout.write(self.style.SUCCESS(f'  ✓ Fixed images for: {product.name}'))

        prefix = '[DRY RUN] Would fix' if dry_run else 'Fixed'
        self.stdout.write(self.style.SUCCESS(f'\n{prefix} {fixed_count} products with invalid images'))
