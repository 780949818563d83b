from django.core.management.base import BaseCommand

from storefront.catalog.models import Product


class Command(BaseCommand):
    help = 'Report products with missing, empty or suspicious image entries'

    def handle(self, *args, **options):
        problems = 0
        products = Product.objects.all().order_by('id')

        for product in products:
            images = product.images if isinstance(product.images, list) else []
            issues = []
            if not images:
                issues.append('no images')
            for index, image in enumerate(images):
                if not isinstance(image, str) or not image.strip():
                    issues.append(f'image {index} is empty')
                elif not image.startswith(('/', 'http://', 'https://')):
                    issues.append(f'image {index} is not an absolute path or URL: {image}')
                elif ' ' in image and image.startswith('http'):
                    issues.append(f'image {index} URL contains spaces: {image}')

            if issues:
                problems += 1
                self.stdout.write(self.style.WARNING(f'{product.name} (ID {product.id}):'))
                for issue in issues:
                    self.stdout.write(f'  - {issue}')

        if problems:
            self.stdout.write(self.style.ERROR(f'\n{problems} of {products.count()} products have image issues'))
        else:
            self.stdout.write(self.style.SUCCESS(f'\nAll {products.count()} products have valid image entries'))
