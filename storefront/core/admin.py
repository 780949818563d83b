from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserCreationForm, UserChangeForm
from .models import User, Address, WishlistItem, AuditLog


class AddressInline(admin.TabularInline):
    model = Address
    extra = 0


class StorefrontUserCreationForm(UserCreationForm):
    class Meta(UserCreationForm.Meta):
        model = User
        fields = ('email', 'name')


class StorefrontUserChangeForm(UserChangeForm):
    class Meta(UserChangeForm.Meta):
        model = User
        fields = '__all__'


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    add_form = StorefrontUserCreationForm
    form = StorefrontUserChangeForm
    list_display = ['email', 'name', 'role', 'email_verified', 'is_active', 'total_orders', 'created_at']
    list_filter = ['role', 'is_active', 'email_verified', 'created_at']
    search_fields = ['email', 'name', 'phone']
    ordering = ['-created_at']
    readonly_fields = ['last_login', 'date_joined', 'created_at', 'updated_at', 'total_orders', 'total_spent', 'last_order_date']
    inlines = [AddressInline]
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        ('Profile', {'fields': ('name', 'phone', 'avatar', 'preferences')}),
        ('Access', {'fields': ('role', 'is_active', 'is_superuser', 'email_verified', 'deleted_at')}),
        ('Stats', {'fields': ('total_orders', 'total_spent', 'last_order_date')}),
        ('Dates', {'fields': ('last_login', 'date_joined', 'created_at', 'updated_at')}),
    )
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('email', 'name', 'role', 'password1', 'password2'),
        }),
    )


@admin.register(WishlistItem)
class WishlistItemAdmin(admin.ModelAdmin):
    list_display = ['user', 'product', 'variant_id', 'auto_add_to_cart', 'notify_on_restock', 'was_out_of_stock', 'added_at']
    list_filter = ['auto_add_to_cart', 'notify_on_restock', 'was_out_of_stock']
    search_fields = ['user__email', 'product__name']


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__email', 'model_name', 'object_id', 'object_name']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'changes', 'ip_address', 'created_at']
