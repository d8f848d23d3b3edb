"""
PATH: users/views/auth.py

USER AUTH VIEWS

- Register (anon, throttled)
- Login with email OR username (anon, throttled); returns a JWT pair
"""

from __future__ import annotations

from django.contrib.auth import authenticate
from drf_spectacular.utils import extend_schema
from rest_framework import generics, status
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from rest_framework_simplejwt.tokens import RefreshToken

from users.serializers import LoginSerializer, RegisterSerializer, UserSerializer


class AuthAnonThrottle(AnonRateThrottle):
    """
    Uses REST_FRAMEWORK['DEFAULT_THROTTLE_RATES']['anon'].
    """

    scope = "anon"


# ---------------- REGISTER ----------------
class RegisterView(generics.GenericAPIView):
    serializer_class = RegisterSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [AuthAnonThrottle]

    @extend_schema(
        request=RegisterSerializer,
        responses={201: dict},
        description="Register a new user account",
    )
    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()

        return Response(
            {
                "message": "User registered successfully",
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_201_CREATED,
        )


# ---------------- LOGIN (JWT) ----------------
class LoginView(generics.GenericAPIView):
    serializer_class = LoginSerializer
    permission_classes = [AllowAny]
    authentication_classes = []
    throttle_classes = [AuthAnonThrottle]

    @extend_schema(
        request=LoginSerializer,
        responses={200: dict, 401: dict},
        description="Authenticate with email or username and password",
    )
    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        user = authenticate(
            request=request,
            username=serializer.validated_data["identifier"],
            password=serializer.validated_data["password"],
        )

        if not user:
            return Response(
                {"detail": "Invalid credentials"},
                status=status.HTTP_401_UNAUTHORIZED,
            )

        refresh = RefreshToken.for_user(user)

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            },
            status=status.HTTP_200_OK,
        )
