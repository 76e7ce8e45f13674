"""
Views for the users app.

Login/logout/me for both JWT and session clients, first-run setup that
creates the initial administrator, admin user management and the login
log.
"""
import logging

from django.contrib.auth import get_user_model
from django.contrib.auth import login as django_login
from django.contrib.auth import logout as django_logout
from rest_framework import generics, permissions, status, viewsets
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView

from common.pagination import DefaultPagination
from .models import LoginLog
from .permissions import HasRolePermission
from .serializers import LoginLogSerializer, LoginSerializer, SetupSerializer, UserSerializer
from .throttling import LoginThrottle, SetupThrottle, get_client_ip

logger = logging.getLogger(__name__)

User = get_user_model()

CanManageUsers = HasRolePermission.for_flag("can_manage_users")


def _unauthorized(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_401_UNAUTHORIZED)


def _token_pair(user) -> dict:
    refresh = RefreshToken.for_user(user)
    return {"refresh": str(refresh), "access": str(refresh.access_token)}


def _record_login(request, user):
    LoginLog.objects.create(
        user=user,
        ip_address=get_client_ip(request),
        user_agent=request.META.get("HTTP_USER_AGENT") or None,
    )
    logger.info("User %s logged in", user.pk)


class LoginView(APIView):
    """
    Email + password login.

    Opens a Django session and also returns a SimpleJWT token pair so both
    browser and API clients can use the same endpoint.  Every successful
    login is written to the login log.
    """
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [LoginThrottle]

    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if not serializer.is_valid():
            return Response({"detail": "Invalid email or password format"}, status=status.HTTP_400_BAD_REQUEST)

        email = serializer.validated_data["email"].strip().lower()
        password = serializer.validated_data["password"]
        user = User.objects.filter(email__iexact=email).first()
        # No authenticators on this view, so 401 is returned explicitly.
        if user is None or not user.has_usable_password():
            return _unauthorized("Invalid email or password")
        if not user.is_active:
            return _unauthorized("Account is deactivated")
        if not user.check_password(password):
            return _unauthorized("Invalid email or password")

        django_login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        _record_login(request, user)
        return Response({"user": UserSerializer(user).data, **_token_pair(user)}, status=status.HTTP_200_OK)


class TokenObtainView(TokenObtainPairView):
    """SimpleJWT token pair, behind the same brute-force throttle and login log as `LoginView`."""
    throttle_classes = [LoginThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        try:
            serializer.is_valid(raise_exception=True)
        except TokenError as exc:
            raise InvalidToken(exc.args[0])
        _record_login(request, serializer.user)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    """End the session; blacklist the refresh token when one is supplied."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        refresh_token = request.data.get("refresh") if hasattr(request.data, "get") else None
        if refresh_token:
            try:
                RefreshToken(refresh_token).blacklist()
            except TokenError:
                return Response({"detail": "Invalid or expired token."}, status=status.HTTP_400_BAD_REQUEST)
        django_logout(request)
        return Response({"detail": "Logged out"}, status=status.HTTP_200_OK)


class MeView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)


class SetupStatusView(APIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        has_users = User.objects.exists()
        return Response({"is_configured": has_users, "has_users": has_users})


class SetupCompleteView(APIView):
    """Create the first administrator.  Refused once any user exists."""
    permission_classes = [permissions.AllowAny]
    authentication_classes = []
    throttle_classes = [SetupThrottle]

    def post(self, request):
        if User.objects.exists():
            return Response({"detail": "System is already configured"}, status=status.HTTP_409_CONFLICT)

        serializer = SetupSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        django_login(request, user, backend="django.contrib.auth.backends.ModelBackend")
        logger.info("Initial setup completed, administrator %s created", user.pk)
        return Response(
            {"success": True, "user": UserSerializer(user).data, **_token_pair(user)},
            status=status.HTTP_201_CREATED,
        )


class UserViewSet(viewsets.ModelViewSet):
    """Admin user management: list, retrieve, create, update, delete."""
    queryset = User.objects.select_related("profile").order_by("id")
    serializer_class = UserSerializer
    permission_classes = [permissions.IsAuthenticated, CanManageUsers]


class LoginLogListView(generics.ListAPIView):
    queryset = LoginLog.objects.select_related("user", "user__profile").order_by("-created_at", "-id")
    serializer_class = LoginLogSerializer
    permission_classes = [permissions.IsAuthenticated, CanManageUsers]
    pagination_class = DefaultPagination
