from django.contrib import admin
from .models import Category, Product, ProductVariant, ProductReview


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'parent', 'is_active', 'sort_order', 'created_at']
    list_filter = ['is_active', 'parent']
    search_fields = ['name', 'slug', 'description']
    prepopulated_fields = {'slug': ('name',)}
    ordering = ['sort_order', 'name']


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'brand', 'price', 'stock_quantity', 'in_stock', 'featured', 'sales']
    list_filter = ['category', 'brand', 'in_stock', 'featured', 'best_seller', 'new_arrival', 'todays_deals']
    search_fields = ['name', 'sku', 'brand', 'description']
    ordering = ['-created_at']
    inlines = [ProductVariantInline]
    readonly_fields = ['rating', 'review_count', 'views', 'sales', 'created_at', 'updated_at']


@admin.register(ProductReview)
class ProductReviewAdmin(admin.ModelAdmin):
    list_display = ['product', 'user', 'rating', 'created_at']
    list_filter = ['rating', 'created_at']
    search_fields = ['product__name', 'user__email', 'comment']
    ordering = ['-created_at']
