"""
Management command to create or repair the storefront admin account
"""
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

DEFAULT_ADMIN_PASSWORD = 'Admin123!'


class Command(BaseCommand):
    help = 'Create the admin user, or restore its admin role, active flag and password'

    def add_arguments(self, parser):
        parser.add_argument(
            '--email',
            default=settings.STOREFRONT_ADMIN_EMAIL,
            help='Admin e-mail address',
        )
        parser.add_argument(
            '--password',
            default=DEFAULT_ADMIN_PASSWORD,
            help='Password to set on the admin account',
        )
        parser.add_argument(
            '--name',
            default='Admin User',
            help='Display name used when the account is created',
        )

    def handle(self, *args, **options):
        User = get_user_model()
        email = options['email'].strip().lower()
        password = options['password']

        self.stdout.write(self.style.SUCCESS('Admin User Troubleshooter'))
        self.stdout.write('=' * 40)

        user = User.objects.filter(email=email).first()
        if user is None:
            self.stdout.write(self.style.WARNING(f'Admin user {email} not found. Creating...'))
            User.objects.create_superuser(email=email, password=password, name=options['name'])
            self.stdout.write(self.style.SUCCESS('✓ Admin user created'))
        else:
            self.stdout.write(f'✓ Found {email}')
            if user.role != User.ROLE_ADMIN:
                self.stdout.write(self.style.WARNING('  Role was not admin. Fixing...'))
            user.role = User.ROLE_ADMIN
            user.is_active = True
            user.email_verified = True
            user.deleted_at = None
            user.set_password(password)
            user.save()
            self.stdout.write(self.style.SUCCESS('✓ Admin user updated'))

        self.stdout.write('\nAdmin login:')
        self.stdout.write(f'  Email: {email}')
        self.stdout.write(f'  Password: {password}')
