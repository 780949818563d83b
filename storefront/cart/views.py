import logging

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from storefront.core.utils import success_response, error_response, first_error_message
from . import services
from .models import Cart
from .serializers import (
    CartSerializer, CartItemInputSerializer, CartItemUpdateSerializer,
    CartItemRemoveSerializer, CartSyncSerializer
)

logger = logging.getLogger(__name__)


def _cart_data(cart):
    cart = Cart.objects.prefetch_related('items__product').get(pk=cart.pk)
    return CartSerializer(cart).data


def _request_payload(request):
    """DELETE clients may send the item in the query string instead of a body"""
    if request.data:
        return request.data
    return request.query_params


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cart_detail(request):
    return success_response(data=_cart_data(services.get_cart(request.user)))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_add(request):
    """Add an item; an existing line for the same product and variant is incremented"""
    serializer = CartItemInputSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    data = serializer.validated_data
    try:
        cart = services.add_item(request.user, data['product_id'], data['quantity'], data.get('variant_id'))
    except services.CartError as e:
        return error_response(e.message, e.status_code)
    return success_response(data=_cart_data(cart), message='Item added to cart')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def cart_update(request):
    """Change a line's quantity; quantity 0 removes it"""
    serializer = CartItemUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    data = serializer.validated_data
    try:
        cart = services.update_item(request.user, data['product_id'], data['quantity'], data.get('variant_id'))
    except services.CartError as e:
        return error_response(e.message, e.status_code)
    return success_response(data=_cart_data(cart), message='Cart updated')


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def cart_remove(request):
    serializer = CartItemRemoveSerializer(data=_request_payload(request))
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    data = serializer.validated_data
    cart = services.remove_item(request.user, data['product_id'], data.get('variant_id'))
    return success_response(data=_cart_data(cart), message='Item removed from cart')


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def cart_clear(request):
    cart = services.clear_cart(request.user)
    return success_response(data=_cart_data(cart), message='Cart cleared')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def cart_sync(request):
    """Replace the server cart with the client's local cart"""
    serializer = CartSyncSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    valid_items, invalid_items = [], []
    for raw_item in serializer.validated_data['items']:
        item_serializer = CartItemInputSerializer(data=raw_item)
        if item_serializer.is_valid():
            valid_items.append(dict(item_serializer.validated_data))
        else:
            invalid_items.append({**raw_item, 'error': first_error_message(item_serializer.errors)})

    cart, results = services.sync_cart(request.user, valid_items)
    results['failed'].extend(invalid_items)
    logger.info(
        f"Cart synced for user {request.user.id}: "
        f"{len(results['success'])} added, {len(results['failed'])} failed"
    )
    return success_response(
        data={'cart': _cart_data(cart), 'sync_results': results},
        message='Cart synced',
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def cart_stats(request):
    return success_response(data=services.get_cart_stats(request.user))
