import django_filters
from django.db.models import Q

from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Storefront product browsing filters"""
    category = django_filters.CharFilter(method='filter_category')
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='iexact')
    search = django_filters.CharFilter(method='filter_search')
    min_price = django_filters.NumberFilter(field_name='price', lookup_expr='gte')
    max_price = django_filters.NumberFilter(field_name='price', lookup_expr='lte')
    featured = django_filters.BooleanFilter(field_name='featured')
    best_seller = django_filters.BooleanFilter(field_name='best_seller')
    new_arrival = django_filters.BooleanFilter(field_name='new_arrival')
    todays_deals = django_filters.BooleanFilter(field_name='todays_deals')
    in_stock = django_filters.BooleanFilter(field_name='in_stock')
    tag = django_filters.CharFilter(field_name='tags', lookup_expr='icontains')

    class Meta:
        model = Product
        fields = ['category', 'brand', 'featured', 'best_seller', 'new_arrival', 'todays_deals', 'in_stock']

    def filter_category(self, queryset, name, value):
        """Match a category by id, slug or name"""
        value = value.strip()
        if not value or value.lower() == 'all':
            return queryset
        if value.isdigit():
            return queryset.filter(category_id=int(value))
        return queryset.filter(Q(category__slug=value.lower()) | Q(category__name__iexact=value))

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(brand__icontains=value) |
            Q(tags__icontains=value)
        )


class AdminProductFilter(ProductFilter):
    """Admin listing: partial brand match and SKU search"""
    brand = django_filters.CharFilter(field_name='brand', lookup_expr='icontains')

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(description__icontains=value) |
            Q(brand__icontains=value) |
            Q(sku__icontains=value)
        )
