"""
API Views for account registration and login.

Both endpoints are open to anonymous clients and return an API token
that authenticates every task endpoint.
"""

import logging

from django.contrib.auth import authenticate, get_user_model
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from drf_spectacular.utils import extend_schema

from tasks.stats import ErrorCode
from tasks.views import error_response

from .serializers import AccountSerializer, LoginSerializer, RegisterSerializer


logger = logging.getLogger(__name__)


class LoginRateThrottle(AnonRateThrottle):
    """Rate limit for login and registration - 20 requests per minute."""
    rate = '20/min'


def _account_payload(user) -> dict:
    Token.objects.get_or_create(user=user)
    return AccountSerializer(user).data


@extend_schema(
    summary="Register a new account",
    request=RegisterSerializer,
    responses={201: AccountSerializer},
    tags=['Accounts']
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def register(request: Request) -> Response:
    """
    Create an account and return its API token.

    POST /api/user/register/

    Request Body:
    {
        "name": "alice",
        "email": "alice@example.com",
        "password": "..."
    }
    """
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            ErrorCode.ERR_MISSING_FIELD,
            'All input fields are necessary',
            status.HTTP_400_BAD_REQUEST,
            errors=serializer.errors
        )

    data = serializer.validated_data
    User = get_user_model()

    if User.objects.filter(email__iexact=data['email']).exists():
        return error_response(
            ErrorCode.ERR_USER_EXISTS,
            'User already exists',
            status.HTTP_400_BAD_REQUEST
        )

    if User.objects.filter(username=data['name']).exists():
        return error_response(
            ErrorCode.ERR_USER_EXISTS,
            'Name already exists, please choose another',
            status.HTTP_400_BAD_REQUEST
        )

    user = User.objects.create_user(
        username=data['name'],
        email=data['email'],
        password=data['password']
    )
    logger.info("Registered user %s", user.pk)

    return Response(_account_payload(user), status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Log in",
    request=LoginSerializer,
    responses={200: AccountSerializer},
    tags=['Accounts']
)
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login(request: Request) -> Response:
    """
    Check credentials and return the account's API token.

    POST /api/user/login/
    """
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return error_response(
            ErrorCode.ERR_MISSING_FIELD,
            'Name and password are required',
            status.HTTP_400_BAD_REQUEST,
            errors=serializer.errors
        )

    user = authenticate(
        request,
        username=serializer.validated_data['name'],
        password=serializer.validated_data['password']
    )
    if user is None:
        logger.warning("Failed login for %r", serializer.validated_data['name'])
        return error_response(
            ErrorCode.ERR_INVALID_CREDENTIALS,
            'Invalid name or password',
            status.HTTP_401_UNAUTHORIZED
        )

    return Response(_account_payload(user))
