from rest_framework import serializers

from .models import Order, OrderItem, OrderStatusHistory


class OrderItemSerializer(serializers.ModelSerializer):
    product_id = serializers.IntegerField(read_only=True)
    image = serializers.SerializerMethodField()
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product_id', 'name', 'price', 'quantity', 'variant', 'subtotal', 'image']

    def get_image(self, obj):
        if obj.product is None or not obj.product.images:
            return None
        return obj.product.images[0]


class OrderStatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ['status', 'note', 'timestamp']


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    status_history = OrderStatusHistorySerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='user.name', read_only=True, default=None)
    customer_email = serializers.CharField(source='user.email', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'user', 'customer_name', 'customer_email', 'items',
            'subtotal', 'tax', 'shipping', 'total', 'status', 'payment_status', 'payment_method',
            'shipping_address', 'billing_address', 'notes', 'tracking_number', 'estimated_delivery',
            'delivered_at', 'return_reason', 'status_history', 'created_at', 'updated_at'
        ]
        read_only_fields = fields


class OrderSummarySerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='user.name', read_only=True, default=None)
    customer_email = serializers.CharField(source='user.email', read_only=True, default=None)

    class Meta:
        model = Order
        fields = [
            'id', 'order_number', 'customer_name', 'customer_email', 'total',
            'status', 'payment_status', 'created_at'
        ]
        read_only_fields = fields


class OrderItemInputSerializer(serializers.Serializer):
    product = serializers.IntegerField(error_messages={'required': 'Product ID is required'})
    quantity = serializers.IntegerField(min_value=1, error_messages={'min_value': 'Quantity must be at least 1'})
    variant = serializers.DictField(required=False, allow_null=True)
    variant_id = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class OrderCreateSerializer(serializers.Serializer):
    items = OrderItemInputSerializer(many=True, allow_empty=False)
    shipping_address = serializers.DictField(error_messages={'required': 'Shipping address is required'})
    billing_address = serializers.DictField(error_messages={'required': 'Billing address is required'})
    payment_method = serializers.CharField(max_length=50, error_messages={'required': 'Payment method is required'})
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class OrderReturnSerializer(serializers.Serializer):
    reason = serializers.CharField(error_messages={
        'required': 'Return reason is required',
        'blank': 'Return reason is required',
    })
    items = serializers.ListField(required=False)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, error_messages={'invalid_choice': 'Invalid status'})
    tracking_number = serializers.CharField(required=False, allow_blank=True, max_length=100)
    notes = serializers.CharField(required=False, allow_blank=True, max_length=500)
    payment_status = serializers.ChoiceField(choices=Order.PAYMENT_STATUS_CHOICES, required=False)
