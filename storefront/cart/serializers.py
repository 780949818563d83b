from rest_framework import serializers

from .models import Cart, CartItem


class CartItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    image = serializers.SerializerMethodField()
    in_stock = serializers.BooleanField(source='product.in_stock', read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = CartItem
        fields = [
            'id', 'product_id', 'product_name', 'variant_id', 'variant_name', 'price',
            'quantity', 'subtotal', 'image', 'in_stock', 'added_at', 'updated_at'
        ]

    def get_image(self, obj):
        images = obj.product.images or []
        return images[0] if images else None


class CartSerializer(serializers.ModelSerializer):
    items = CartItemSerializer(many=True, read_only=True)
    item_count = serializers.IntegerField(read_only=True)
    total_items = serializers.IntegerField(read_only=True)
    total_value = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Cart
        fields = ['id', 'items', 'item_count', 'total_items', 'total_value', 'updated_at']


class CartItemInputSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    variant_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')


class CartItemUpdateSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    quantity = serializers.IntegerField(min_value=0)
    variant_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, default='')


class CartItemRemoveSerializer(serializers.Serializer):
    product_id = serializers.IntegerField()
    variant_id = serializers.CharField(required=False, allow_blank=True, allow_null=True, default=None)


class CartSyncSerializer(serializers.Serializer):
    items = serializers.ListField(child=serializers.DictField(), allow_empty=True)
