"""
Management command to check database connectivity and, optionally, a running API
"""
import requests
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import connection, DatabaseError


class Command(BaseCommand):
    help = 'Check the database connection, list tables and user counts, optionally check the API health endpoint'

    def add_arguments(self, parser):
        parser.add_argument(
            '--api-url',
            help='Base URL of a running server to check, e.g. http://localhost:8000/api',
        )
        parser.add_argument(
            '--timeout',
            type=float,
            default=5.0,
            help='HTTP timeout in seconds for the API health check',
        )

    def check_database(self):
        settings_dict = connection.settings_dict
        self.stdout.write(f"Database engine: {settings_dict['ENGINE']}")
        self.stdout.write(f"Database name: {settings_dict['NAME']}")
        try:
            connection.ensure_connection()
        except DatabaseError as e:
            raise CommandError(f'Could not connect to the database: {e}')
        self.stdout.write(self.style.SUCCESS('✓ Connected to database'))

        tables = connection.introspection.table_names()
        self.stdout.write(f'Tables ({len(tables)}):')
        for table in tables:
            self.stdout.write(f'  - {table}')

        User = get_user_model()
        if User._meta.db_table not in tables:
            self.stdout.write(self.style.WARNING('Users table missing. Run `python manage.py migrate`.'))
            return

        users = User.objects.count()
        admins = User.objects.filter(role=User.ROLE_ADMIN).count()
        self.stdout.write(f'Users in database: {users} ({admins} admin)')
        if users == 0:
            self.stdout.write(self.style.WARNING('No users found. Run `python manage.py fix_admin_user` to create one.'))

    def check_api(self, api_url, timeout):
        url = f"{api_url.rstrip('/')}/health/"
        self.stdout.write(f'\nProbing {url}')
        try:
            response = requests.get(url, timeout=timeout)
        except requests.RequestException as e:
            self.stdout.write(self.style.ERROR(f'✗ API not reachable: {e}'))
            return False

        if response.status_code != 200:
            self.stdout.write(self.style.ERROR(f'✗ API returned HTTP {response.status_code}'))
            return False

        body = response.json()
        self.stdout.write(self.style.SUCCESS(
            f"✓ API healthy: {body.get('status')} (version {body.get('version')}, "
            f"{response.elapsed.total_seconds() * 1000:.0f}ms)"
        ))
        return True

    def handle(self, *args, **options):
        self.check_database()
        if options.get('api_url'):
            if not self.check_api(options['api_url'], options['timeout']):
                raise CommandError('API health check failed')
