from rest_framework import status, serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema
from .permissions import IsIssuer
from .serializers import IssuerLoginSerializer, IssuerSerializer
from .services import (
    login_issuer,
    get_issuer_name,
    InvalidSecretCodeError,
    InvalidIssuerNameError,
)


# Response serializers for API documentation
class LoginResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    issuer_name = serializers.CharField()
    access = serializers.CharField()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    request=IssuerLoginSerializer,
    responses={
        200: LoginResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
    },
    description="Log in with the shared secret code and an issuer name to receive an access token.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with the shared secret code."""
    serializer = IssuerLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        access = login_issuer(**serializer.validated_data)
    except InvalidIssuerNameError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_400_BAD_REQUEST
        )
    except InvalidSecretCodeError as e:
        return Response(
            {'error': str(e)},
            status=status.HTTP_401_UNAUTHORIZED
        )

    return Response({
        'message': 'Login successful',
        'issuer_name': serializer.validated_data['issuer_name'].strip(),
        'access': access,
    })


@extend_schema(
    responses={200: IssuerSerializer},
    description="Get the issuer name of the current access token.",
    tags=['auth'],
)
@api_view(['GET'])
@permission_classes([IsIssuer])
def current_issuer(request):
    """Get the logged-in issuer."""
    return Response(IssuerSerializer({'issuer_name': get_issuer_name(request)}).data)
