"""Password rules for storefront accounts"""
import re

from django.core.exceptions import ValidationError

PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]+$')
PASSWORD_HELP = (
    'Password must contain at least one uppercase letter, one lowercase letter, '
    'one number, and one special character (@$!%*?&)'
)


class PasswordComplexityValidator:
    """Require mixed case, a digit and one of @$!%*?& and nothing else"""

    def validate(self, password, user=None):
        if not PASSWORD_PATTERN.match(password or ''):
            raise ValidationError(PASSWORD_HELP, code='password_too_simple')

    def get_help_text(self):
        return PASSWORD_HELP
