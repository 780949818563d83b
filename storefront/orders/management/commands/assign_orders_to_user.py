from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.db.models import Count, Max, Sum

from storefront.orders.models import Order


class Command(BaseCommand):
    help = 'Assign every order to one user and recalculate that user\'s order stats'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            default='testuser@example.com',
            help='E-mail of the user who should own the orders (default: testuser@example.com)',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        email = options['email'].strip().lower()
        user = User.objects.filter(email=email).first()
        if user is None:
            raise CommandError(f'User not found: {email}')

        self.stdout.write(f'Found user: {user.name} (ID {user.id})')

        with transaction.atomic():
            updated = Order.objects.update(user=user)
            stats = Order.objects.filter(user=user).exclude(status=Order.STATUS_CANCELLED).aggregate(
                total_orders=Count('id'), total_spent=Sum('total'), last_order_date=Max('created_at')
            )
            user.total_orders = stats['total_orders'] or 0
            user.total_spent = stats['total_spent'] or 0
            user.last_order_date = stats['last_order_date']
            user.save(update_fields=['total_orders', 'total_spent', 'last_order_date', 'updated_at'])

        self.stdout.write(self.style.SUCCESS(f'Updated {updated} orders'))
        self.stdout.write(f'Orders now owned by {email}: {Order.objects.filter(user=user).count()}')
