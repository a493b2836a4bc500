from rest_framework.authentication import TokenAuthentication


class BearerTokenAuthentication(TokenAuthentication):
    """Token authentication using the ``Authorization: Bearer <token>`` header."""
    keyword = 'Bearer'
