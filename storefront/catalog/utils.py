"""
Utility functions for catalog operations
"""
import json
import random
import re

from .models import Product


def get_prefix_for_product(category_name=None, product_name=None):
    """Get 3-character SKU prefix from category name, falling back to the product name"""
    for source in (category_name, product_name):
        cleaned = re.sub(r'[^A-Za-z0-9]', '', source or '').upper()
        if len(cleaned) >= 3:
            return cleaned[:3]
    return 'BBN'


def generate_unique_sku(category_name=None, product_name=None):
    """Generate a unique `CAT-NNNN` SKU"""
    prefix = get_prefix_for_product(category_name, product_name)
    for _ in range(50):
        sku = f"{prefix}-{random.randint(0, 9999):04d}"
        if not Product.objects.filter(sku=sku).exists():
            return sku
    # Four digits exhausted for this prefix; widen the numeric part
    while True:
        sku = f"{prefix}-{random.randint(10000, 999999)}"
        if not Product.objects.filter(sku=sku).exists():
            return sku


def seo_slug(name):
    """Lowercase, runs of non-alphanumerics collapsed to single hyphens"""
    return re.sub(r'[^a-z0-9]+', '-', (name or '').lower()).strip('-')


def generate_unique_seo_url(name, exclude_pk=None):
    base = seo_slug(name)[:110] or 'product'
    candidate = base
    suffix = 2
    queryset = Product.objects.all()
    if exclude_pk:
        queryset = queryset.exclude(pk=exclude_pk)
    while queryset.filter(seo_url=candidate).exists():
        candidate = f"{base}-{suffix}"
        suffix += 1
    return candidate


def parse_tags(value):
    """Accept a list or a comma separated string"""
    if value is None:
        return None
    if isinstance(value, str):
        return [tag.strip() for tag in value.split(',') if tag.strip()]
    return [str(tag).strip() for tag in value if str(tag).strip()]


def parse_json_field(value, expected_type, error_message):
    """Decode JSON strings sent through multipart forms"""
    if value is None or value == '':
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            raise ValueError(error_message)
    if not isinstance(value, expected_type):
        raise ValueError(error_message)
    return value
