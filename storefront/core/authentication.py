"""
Fixed bearer tokens for local development and scripted smoke tests.

`Bearer mock-admin-token` and `Bearer mock-user-token` resolve to the seeded
admin and test accounts when STOREFRONT_MOCK_AUTH is enabled. Any other token
falls through to JWT authentication.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework import authentication, exceptions

logger = logging.getLogger(__name__)

User = get_user_model()


class MockTokenAuthentication(authentication.BaseAuthentication):
    keyword = 'Bearer'

    def authenticate(self, request):
        if not getattr(settings, 'STOREFRONT_MOCK_AUTH', False):
            return None

        header = authentication.get_authorization_header(request).split()
        if len(header) != 2 or header[0].decode().lower() != self.keyword.lower():
            return None

        token = header[1].decode()
        email = settings.STOREFRONT_MOCK_TOKENS.get(token)
        if not email:
            return None

        user = User.objects.filter(email=email, is_active=True).first()
        if user is None:
            logger.warning(f"Mock token {token} used but {email} does not exist")
            raise exceptions.AuthenticationFailed('Not authorized, token failed')
        return (user, token)

    def authenticate_header(self, request):
        return self.keyword
