from decimal import Decimal

from django.db import transaction
from rest_framework import serializers

from storefront.core.utils import slugify_name
from .models import Category, Product, ProductVariant, ProductReview


class CategorySerializer(serializers.ModelSerializer):
    parent_id = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(), source='parent', allow_null=True, required=False,
        error_messages={'does_not_exist': 'Parent category not found'}
    )
    parent_name = serializers.CharField(source='parent.name', read_only=True, default=None)
    product_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            'id', 'name', 'slug', 'description', 'parent_id', 'parent_name', 'image', 'is_active',
            'sort_order', 'meta_title', 'meta_description', 'product_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'slug', 'created_at', 'updated_at']
        extra_kwargs = {
            # Case-insensitive uniqueness is checked in validate_name
            'name': {'validators': []},
        }

    def get_product_count(self, obj):
        count = getattr(obj, 'product_count', None)
        if count is None:
            count = obj.products.count()
        return count

    def validate_name(self, value):
        value = value.strip()
        existing = Category.objects.filter(name__iexact=value)
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError('Category with this name already exists')
        return value

    def validate(self, attrs):
        parent = attrs.get('parent')
        if self.instance is not None and parent is not None and parent.pk == self.instance.pk:
            raise serializers.ValidationError({'parent_id': 'Category cannot be its own parent'})
        return attrs

    def _unique_slug(self, name):
        base = slugify_name(name) or 'category'
        slug = base
        suffix = 2
        existing = Category.objects.all()
        if self.instance is not None:
            existing = existing.exclude(pk=self.instance.pk)
        while existing.filter(slug=slug).exists():
            slug = f"{base}-{suffix}"
            suffix += 1
        return slug

    def create(self, validated_data):
        validated_data['slug'] = self._unique_slug(validated_data['name'])
        return super().create(validated_data)

    def update(self, instance, validated_data):
        if 'name' in validated_data and validated_data['name'] != instance.name:
            validated_data['slug'] = self._unique_slug(validated_data['name'])
        return super().update(instance, validated_data)


class ProductVariantSerializer(serializers.ModelSerializer):
    id = serializers.CharField(source='variant_id', read_only=True)

    class Meta:
        model = ProductVariant
        fields = ['id', 'name', 'price', 'in_stock', 'stock_quantity']


def _resolve_variant_id(variant, index):
    return variant.get('id') or f'variant-{index}'


class VariantInputSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, max_length=50)
    name = serializers.CharField(max_length=100)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal('0'))
    stock_quantity = serializers.IntegerField(min_value=0, required=False, default=0)
    in_stock = serializers.BooleanField(required=False)


class ProductReviewSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.name', read_only=True)

    class Meta:
        model = ProductReview
        fields = ['id', 'user', 'user_name', 'rating', 'comment', 'created_at']
        read_only_fields = ['id', 'user', 'user_name', 'created_at']


class CategoryField(serializers.RelatedField):
    """Category referenced by id, name or slug"""
    default_error_messages = {
        'does_not_exist': 'Category not found',
    }

    def get_queryset(self):
        return Category.objects.all()

    def to_internal_value(self, data):
        value = str(data).strip()
        queryset = self.get_queryset()
        if value.isdigit():
            category = queryset.filter(pk=int(value)).first()
        else:
            category = queryset.filter(name__iexact=value).first() or queryset.filter(slug=value.lower()).first()
        if category is None:
            self.fail('does_not_exist')
        return category

    def to_representation(self, value):
        return value.pk


class ProductListSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    discount_percentage = serializers.IntegerField(read_only=True)
    is_on_sale = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'price', 'original_price', 'discount_percentage', 'is_on_sale',
            'category', 'category_name', 'brand', 'images', 'rating', 'review_count',
            'in_stock', 'stock_quantity', 'tags', 'featured', 'best_seller', 'new_arrival',
            'todays_deals', 'discount', 'sku', 'seo_url', 'sales', 'created_at'
        ]
        read_only_fields = fields


class ProductSerializer(serializers.ModelSerializer):
    """Full product with variants and reviews; also handles admin writes"""
    category = CategoryField(allow_null=True, required=False)
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    discount_percentage = serializers.IntegerField(read_only=True)
    is_on_sale = serializers.BooleanField(read_only=True)
    average_rating = serializers.DecimalField(source='rating', max_digits=2, decimal_places=1, read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)
    reviews = ProductReviewSerializer(many=True, read_only=True)
    variants_input = VariantInputSerializer(many=True, required=False, write_only=True)

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'description', 'price', 'original_price', 'discount_percentage', 'is_on_sale',
            'category', 'category_name', 'brand', 'images', 'rating', 'average_rating', 'review_count',
            'reviews', 'in_stock', 'stock_quantity', 'nutrition_facts', 'variants', 'variants_input',
            'tags', 'featured', 'best_seller', 'new_arrival', 'todays_deals', 'discount', 'weight',
            'dimensions', 'shipping_weight', 'sku', 'upc', 'meta_title', 'meta_description', 'seo_url',
            'views', 'sales', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'rating', 'review_count', 'views', 'sales', 'created_at', 'updated_at']
        extra_kwargs = {
            'sku': {'required': False, 'allow_null': True},
            'seo_url': {'required': False, 'allow_null': True},
        }

    def validate_images(self, value):
        if not isinstance(value, list) or not all(isinstance(image, str) for image in value):
            raise serializers.ValidationError('Images must be a list of paths or URLs')
        return value

    def validate_tags(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError('Tags must be a list')
        return [str(tag).strip() for tag in value if str(tag).strip()]

    def validate_variants_input(self, value):
        seen = set()
        for index, variant in enumerate(value):
            variant_id = _resolve_variant_id(variant, index)
            if variant_id in seen:
                raise serializers.ValidationError(f'Duplicate variant id "{variant_id}"')
            seen.add(variant_id)
        return value

    def validate(self, attrs):
        if 'stock_quantity' in attrs and 'in_stock' not in attrs:
            attrs['in_stock'] = attrs['stock_quantity'] > 0
        return attrs

    def _replace_variants(self, product, variants):
        product.variants.all().delete()
        for index, variant in enumerate(variants):
            stock_quantity = variant.get('stock_quantity', 0)
            ProductVariant.objects.create(
                product=product,
                variant_id=_resolve_variant_id(variant, index),
                name=variant['name'],
                price=variant['price'],
                stock_quantity=stock_quantity,
                in_stock=variant.get('in_stock', stock_quantity > 0),
            )

    @transaction.atomic
    def create(self, validated_data):
        variants = validated_data.pop('variants_input', None)
        product = super().create(validated_data)
        if variants:
            self._replace_variants(product, variants)
        return product

    @transaction.atomic
    def update(self, instance, validated_data):
        variants = validated_data.pop('variants_input', None)
        product = super().update(instance, validated_data)
        if variants is not None:
            self._replace_variants(product, variants)
        return product
