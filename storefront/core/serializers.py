from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers

from .models import Address, WishlistItem, AuditLog

User = get_user_model()

CURRENCY_CHOICES = ['USD', 'INR', 'EUR']
LANGUAGE_CHOICES = ['en', 'es', 'fr']


class AddressSerializer(serializers.ModelSerializer):
    class Meta:
        model = Address
        fields = ['id', 'type', 'label', 'address', 'city', 'state', 'pin_code', 'country', 'is_default', 'created_at']
        read_only_fields = ['id', 'created_at']


class WishlistItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    product_price = serializers.DecimalField(source='product.price', max_digits=10, decimal_places=2, read_only=True)
    product_image = serializers.SerializerMethodField()
    in_stock = serializers.BooleanField(source='product.in_stock', read_only=True)

    class Meta:
        model = WishlistItem
        fields = [
            'id', 'product', 'product_name', 'product_price', 'product_image', 'in_stock',
            'variant_id', 'auto_add_to_cart', 'notify_on_restock', 'was_out_of_stock', 'added_at'
        ]
        read_only_fields = ['id', 'product', 'was_out_of_stock', 'added_at']

    def get_product_image(self, obj):
        images = obj.product.images or []
        return images[0] if images else None


class UserSerializer(serializers.ModelSerializer):
    stats = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'name', 'email', 'role', 'phone', 'avatar', 'email_verified',
            'preferences', 'stats', 'is_active', 'last_login', 'created_at'
        ]
        read_only_fields = fields

    def get_stats(self, obj):
        return {
            'total_orders': obj.total_orders,
            'total_spent': str(obj.total_spent),
            'last_order_date': obj.last_order_date,
        }


class UserDetailSerializer(UserSerializer):
    """User with saved addresses and wishlist, for /auth/me"""
    addresses = AddressSerializer(many=True, read_only=True)
    wishlist = WishlistItemSerializer(source='wishlist_items', many=True, read_only=True)

    class Meta(UserSerializer.Meta):
        fields = UserSerializer.Meta.fields + ['addresses', 'wishlist']
        read_only_fields = fields


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=50)
    email = serializers.EmailField()
    phone = serializers.CharField(max_length=20, required=False, allow_blank=True)
    password = serializers.CharField(write_only=True, min_length=8)

    def validate_email(self, value):
        return value.strip().lower()

    def validate_password(self, value):
        validate_password(value)
        return value


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['name', 'phone', 'avatar', 'preferences']
        extra_kwargs = {
            'name': {'min_length': 2, 'required': False},
        }

    def validate_preferences(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('Preferences must be an object')
        currency = value.get('currency')
        if currency is not None and currency not in CURRENCY_CHOICES:
            raise serializers.ValidationError(f"Currency must be one of {', '.join(CURRENCY_CHOICES)}")
        language = value.get('language')
        if language is not None and language not in LANGUAGE_CHOICES:
            raise serializers.ValidationError(f"Language must be one of {', '.join(LANGUAGE_CHOICES)}")
        merged = dict(self.instance.preferences or {}) if self.instance else {}
        merged.update(value)
        return merged


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=8)

    def validate_new_password(self, value):
        validate_password(value)
        return value


class PasswordResetSerializer(serializers.Serializer):
    token = serializers.CharField()
    password = serializers.CharField(write_only=True, min_length=8)

    def validate_password(self, value):
        validate_password(value)
        return value


class RoleUpdateSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.EmailField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_email', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']
        read_only_fields = fields
