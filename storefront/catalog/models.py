from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal, ROUND_HALF_UP


class Category(models.Model):
    """Product categories shown in the shop navigation"""
    name = models.CharField(max_length=50, unique=True, db_index=True)
    slug = models.SlugField(max_length=60, unique=True)
    description = models.CharField(max_length=500, blank=True)
    parent = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    image = models.CharField(max_length=500, blank=True)
    is_active = models.BooleanField(default=True)
    sort_order = models.IntegerField(default=0)
    meta_title = models.CharField(max_length=100, blank=True)
    meta_description = models.CharField(max_length=200, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['sort_order', 'name']


class Product(models.Model):
    """Sellable supplement product"""
    name = models.CharField(max_length=100, db_index=True)
    description = models.CharField(max_length=1000)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    original_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(Decimal('0'))])
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    brand = models.CharField(max_length=100, default='BBN', db_index=True)
    images = models.JSONField(default=list, blank=True)
    rating = models.DecimalField(max_digits=2, decimal_places=1, default=Decimal('0.0'),
                                 validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('5'))])
    review_count = models.IntegerField(default=0)
    in_stock = models.BooleanField(default=True, db_index=True)
    stock_quantity = models.IntegerField(default=0, validators=[MinValueValidator(0)])
    nutrition_facts = models.JSONField(default=dict, blank=True)
    tags = models.JSONField(default=list, blank=True)
    featured = models.BooleanField(default=False, db_index=True)
    best_seller = models.BooleanField(default=False)
    new_arrival = models.BooleanField(default=False)
    todays_deals = models.BooleanField(default=False)
    discount = models.IntegerField(default=0, validators=[MinValueValidator(0), MaxValueValidator(100)])
    weight = models.CharField(max_length=50, blank=True)
    dimensions = models.JSONField(default=dict, blank=True)
    shipping_weight = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    sku = models.CharField(max_length=50, unique=True, blank=True, null=True, db_index=True)
    upc = models.CharField(max_length=50, blank=True)
    meta_title = models.CharField(max_length=100, blank=True)
    meta_description = models.CharField(max_length=200, blank=True)
    seo_url = models.SlugField(max_length=120, unique=True, blank=True, null=True)
    views = models.IntegerField(default=0)
    sales = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku or 'NO-SKU'})"

    def save(self, *args, **kwargs):
        from .utils import generate_unique_sku, generate_unique_seo_url
        if not self.sku:
            self.sku = generate_unique_sku(self.category.name if self.category_id else None, self.name)
        if not self.seo_url:
            self.seo_url = generate_unique_seo_url(self.name, exclude_pk=self.pk)
        super().save(*args, **kwargs)

    @property
    def discount_percentage(self):
        if self.original_price and self.original_price > self.price:
            percent = (self.original_price - self.price) / self.original_price * 100
            return int(percent.quantize(Decimal('1'), rounding=ROUND_HALF_UP))
        return 0

    @property
    def is_on_sale(self):
        return bool(self.original_price and self.original_price > self.price)

    @property
    def category_name(self):
        return self.category.name if self.category else None

    def sync_stock_flag(self):
        self.in_stock = self.stock_quantity > 0

    class Meta:
        db_table = 'products'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['category', 'price'], name='products_category_price_idx'),
            models.Index(fields=['-rating'], name='products_rating_idx'),
        ]


class ProductVariant(models.Model):
    """Flavour or size option with its own price and stock"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    variant_id = models.CharField(max_length=50)
    name = models.CharField(max_length=100)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(Decimal('0'))])
    in_stock = models.BooleanField(default=True)
    stock_quantity = models.IntegerField(default=0, validators=[MinValueValidator(0)])

    def __str__(self):
        return f"{self.product.name} - {self.name}"

    def sync_stock_flag(self):
        self.in_stock = self.stock_quantity > 0

    class Meta:
        db_table = 'product_variants'
        ordering = ['id']
        unique_together = [('product', 'variant_id')]


class ProductReview(models.Model):
    """Customer review; one per user per product"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='reviews')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='reviews')
    rating = models.IntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.CharField(max_length=500, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.product.name} - {self.rating}"

    class Meta:
        db_table = 'product_reviews'
        ordering = ['-created_at']
        unique_together = [('product', 'user')]
