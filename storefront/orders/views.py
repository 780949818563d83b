import logging

from django.db.models import Q
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotAuthenticated
from rest_framework.permissions import IsAuthenticated, IsAdminUser, AllowAny

from storefront.core.utils import success_response, error_response, paginate, create_audit_log
from . import services
from .models import Order
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderReturnSerializer, OrderStatusUpdateSerializer,
    OrderStatusHistorySerializer
)

logger = logging.getLogger(__name__)

SORT_FIELDS = ('created_at', 'updated_at', 'total', 'status', 'order_number')


def _order_queryset():
    return Order.objects.select_related('user').prefetch_related('items__product', 'status_history')


def _own_order(request, pk):
    return _order_queryset().filter(pk=pk, user=request.user).first()


def _ordering(request, default='created_at'):
    sort_by = request.query_params.get('sort_by', default)
    if sort_by not in SORT_FIELDS:
        sort_by = default
    prefix = '' if request.query_params.get('sort_order') == 'asc' else '-'
    return [f'{prefix}{sort_by}', '-id']


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def order_list_create(request):
    """
    GET lists the current user's orders; POST places an order.

    Guests may place orders; listing requires authentication.
    """
    if request.method == 'GET':
        if not request.user.is_authenticated:
            raise NotAuthenticated()

        orders = _order_queryset().filter(user=request.user)
        order_status = request.query_params.get('status')
        if order_status and order_status != 'all':
            orders = orders.filter(status=order_status)
        orders = orders.order_by(*_ordering(request))

        page_items, pagination = paginate(request, orders, default_limit=10)
        return success_response(data=OrderSerializer(page_items, many=True).data, pagination=pagination)

    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    data = serializer.validated_data
    user = request.user if request.user.is_authenticated else None
    try:
        order = services.create_order(
            user=user,
            items=data['items'],
            shipping_address=data['shipping_address'],
            billing_address=data['billing_address'],
            payment_method=data['payment_method'],
            notes=data.get('notes', ''),
        )
    except services.OrderError as e:
        return error_response(e.message, e.status_code)

    order = _order_queryset().get(pk=order.pk)
    return success_response(
        data=OrderSerializer(order).data,
        message='Order created successfully',
        status_code=status.HTTP_201_CREATED,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_detail(request, pk):
    order = _own_order(request, pk)
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    return success_response(data=OrderSerializer(order).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def order_cancel(request, pk):
    """Cancel an order that has not shipped and return its stock"""
    order = _own_order(request, pk)
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)

    try:
        services.cancel_order(order, changed_by=request.user)
    except services.OrderError as e:
        return error_response(e.message, e.status_code)

    create_audit_log(request, 'order_cancel', 'Order', order.id, object_name=order.order_number)
    order = _order_queryset().get(pk=order.pk)
    return success_response(data=OrderSerializer(order).data, message='Order cancelled successfully')


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def order_return(request, pk):
    serializer = OrderReturnSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    order = _own_order(request, pk)
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)

    reason = serializer.validated_data['reason']
    try:
        services.request_return(order, reason, changed_by=request.user)
    except services.OrderError as e:
        return error_response(e.message, e.status_code)

    create_audit_log(request, 'order_return', 'Order', order.id, object_name=order.order_number,
                     changes={'reason': reason})
    order = _order_queryset().get(pk=order.pk)
    return success_response(data=OrderSerializer(order).data, message='Return request submitted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def order_tracking(request, pk):
    order = _own_order(request, pk)
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    return success_response(data={
        'order_number': order.order_number,
        'status': order.status,
        'tracking_number': order.tracking_number,
        'estimated_delivery': order.estimated_delivery,
        'status_history': OrderStatusHistorySerializer(order.status_history.all(), many=True).data,
    })


# Admin order views
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_list(request):
    """All orders with status, payment status and customer search filters"""
    orders = _order_queryset()

    order_status = request.query_params.get('status')
    if order_status and order_status != 'all':
        orders = orders.filter(status=order_status)

    payment_status = request.query_params.get('payment_status')
    if payment_status and payment_status != 'all':
        orders = orders.filter(payment_status=payment_status)

    search = request.query_params.get('search')
    if search:
        orders = orders.filter(
            Q(order_number__icontains=search) |
            Q(user__name__icontains=search) |
            Q(user__email__icontains=search)
        )

    orders = orders.order_by(*_ordering(request))
    page_items, pagination = paginate(request, orders, default_limit=20)
    return success_response(data=OrderSerializer(page_items, many=True).data, pagination=pagination)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_detail(request, pk):
    order = _order_queryset().filter(pk=pk).first()
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)
    return success_response(data=OrderSerializer(order).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminUser])
def admin_order_status(request, pk):
    serializer = OrderStatusUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response('Validation error', errors=serializer.errors)

    order = _order_queryset().filter(pk=pk).first()
    if not order:
        return error_response('Order not found', status.HTTP_404_NOT_FOUND)

    data = serializer.validated_data
    old_status = order.status
    try:
        services.update_order_status(
            order,
            data['status'],
            changed_by=request.user,
            tracking_number=data.get('tracking_number'),
            notes=data.get('notes'),
            payment_status=data.get('payment_status'),
        )
    except services.OrderError as e:
        return error_response(e.message, e.status_code)

    create_audit_log(
        request, 'status_change', 'Order', order.id, object_name=order.order_number,
        changes={'status': {'old': old_status, 'new': data['status']}},
    )
    order = _order_queryset().get(pk=order.pk)
    return success_response(data=OrderSerializer(order).data, message='Order status updated successfully')
