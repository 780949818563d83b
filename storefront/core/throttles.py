from rest_framework.throttling import AnonRateThrottle


class AuthRateThrottle(AnonRateThrottle):
    """Per-IP limit on login, registration and token endpoints"""
    scope = 'auth'
