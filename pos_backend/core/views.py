import logging

from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .models import AuditLog
from .permissions import IsAdminRole, is_admin_user
from .serializers import (
    UserSerializer, UserCreateSerializer, RegisterSerializer,
    UserRoleSerializer, UserStatusSerializer, ChangePasswordSerializer,
    ProfileSerializer, AuditLogSerializer
)
from .utils import create_audit_log, ensure_default_admin

User = get_user_model()

logger = logging.getLogger('pos_backend.core')


class UserPagination(PageNumberPagination):
    page_size = 10


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if self.user.status != User.STATUS_ACTIVE:
            raise AuthenticationFailed('User account is suspended.')
        data['user'] = UserSerializer(self.user).data
        create_audit_log(
            request=self.context.get('request'),
            user=self.user,
            action='login',
            model_name='User',
            object_id=self.user.id,
            object_name=self.user.email,
        )
        logger.info(f"User {self.user.email} logged in")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['email'] = user.email
        token['name'] = user.name
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh serializer that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            refresh = RefreshToken(attrs['refresh'])
        except TokenError:
            raise InvalidToken('Token is invalid or expired.')

        user_id = refresh.payload.get(api_settings.USER_ID_CLAIM, None)
        if not User.objects.filter(**{api_settings.USER_ID_FIELD: user_id}).exists():
            raise InvalidToken('Token is invalid. User no longer exists.')

        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


def _token_pair_for(user):
    token = CustomTokenObtainPairSerializer.get_token(user)
    return {'access': str(token.access_token), 'refresh': str(token)}


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint"""
    serializer = RegisterSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        logger.info(f"New account registered: {user.email}")
        create_audit_log(request=request, user=user, action='create', model_name='User',
                         object_id=user.id, object_name=user.email)
        return Response({
            'user': UserSerializer(user, context={'request': request}).data,
            **_token_pair_for(user),
        }, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout(request):
    """Blacklist the given refresh token"""
    refresh = request.data.get('refresh')
    if not refresh:
        return Response({'refresh': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
    try:
        RefreshToken(refresh).blacklist()
    except TokenError as e:
        return Response({'error': 'Invalid refresh token', 'message': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    create_audit_log(request=request, action='logout', model_name='User',
                     object_id=request.user.id, object_name=request.user.email)
    logger.info(f"User {request.user.email} logged out")
    return Response({'message': 'Logged out successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get current user"""
    return Response(UserSerializer(request.user, context={'request': request}).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def add_default_user(request):
    """Create the configured default admin account if it is missing"""
    user, created = ensure_default_admin()
    data = UserSerializer(user, context={'request': request}).data
    if created:
        create_audit_log(request=request, action='create', model_name='User',
                         object_id=user.id, object_name=user.email)
        return Response({'message': 'Default user created successfully', 'user': data},
                        status=status.HTTP_201_CREATED)
    return Response({'message': 'Default user already exists', 'user': data})


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def user_list_create(request):
    """List users (filter by role/status, 10 per page) or create a user (admin roles only)"""
    if request.method == 'GET':
        queryset = User.objects.all().order_by('id')
        role = request.query_params.get('role', None)
        user_status = request.query_params.get('status', None)
        if role:
            queryset = queryset.filter(role=role)
        if user_status:
            queryset = queryset.filter(status=user_status)
        paginator = UserPagination()
        page = paginator.paginate_queryset(queryset, request)
        serializer = UserSerializer(page, many=True, context={'request': request})
        return paginator.get_paginated_response(serializer.data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only admin users can create users'}, status=status.HTTP_403_FORBIDDEN)

    logger.info(f"User {request.user.email} is creating a user: {request.data.get('email')}")
    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        create_audit_log(request=request, action='create', model_name='User',
                         object_id=user.id, object_name=user.email,
                         changes={'role': user.role, 'status': user.status})
        logger.info(f"User created successfully: id={user.id}")
        return Response(UserSerializer(user, context={'request': request}).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve a user, or delete it (admin roles only)"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        return Response(UserSerializer(user, context={'request': request}).data)

    if not is_admin_user(request.user):
        return Response({'error': 'Only admin users can delete users'}, status=status.HTTP_403_FORBIDDEN)
    if user.pk == request.user.pk:
        return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)

    if user.photo:
        user.photo.delete(save=False)
    user_id, email = user.id, user.email
    user.delete()
    create_audit_log(request=request, action='delete', model_name='User', object_id=user_id, object_name=email)
    logger.info(f"User {request.user.email} deleted user {email}")
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['PUT'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_update_role(request, pk):
    """Change a user's role"""
    user = get_object_or_404(User, pk=pk)
    serializer = UserRoleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_role = user.role
    user.role = serializer.validated_data['role']
    user.save()
    create_audit_log(request=request, action='role_change', model_name='User', object_id=user.id,
                     object_name=user.email, changes={'role': {'old': old_role, 'new': user.role}})
    return Response(UserSerializer(user, context={'request': request}).data)


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def user_update_status(request, pk):
    """Activate or suspend a user"""
    user = get_object_or_404(User, pk=pk)
    serializer = UserStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    old_status = user.status
    user.status = serializer.validated_data['status']
    user.save()
    create_audit_log(request=request, action='status_change', model_name='User', object_id=user.id,
                     object_name=user.email, changes={'status': {'old': old_status, 'new': user.status}})
    return Response(UserSerializer(user, context={'request': request}).data)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def change_password(request):
    """Change the password of the logged-in user"""
    serializer = ChangePasswordSerializer(data=request.data, context={'request': request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = request.user
    user.set_password(serializer.validated_data['new_password'])
    user.save()
    create_audit_log(request=request, action='password_change', model_name='User',
                     object_id=user.id, object_name=user.email)
    return Response({'message': 'Password updated successfully'})


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def update_profile(request):
    """Update name, email, phone or photo of the logged-in user"""
    serializer = ProfileSerializer(request.user, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = serializer.save()
    changed = sorted(key for key in request.data.keys() if key in ProfileSerializer.Meta.fields)
    create_audit_log(request=request, action='profile_update', model_name='User',
                     object_id=user.id, object_name=user.email, changes={'fields': changed})
    return Response(UserSerializer(user, context={'request': request}).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_activity_log(request, pk):
    """Audit trail of actions performed by a user"""
    user = get_object_or_404(User, pk=pk)
    if user.pk != request.user.pk and not is_admin_user(request.user):
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    logs = AuditLog.objects.filter(user=user).order_by('-created_at', '-id')
    return Response({
        'user': UserSerializer(user, context={'request': request}).data,
        'activity': AuditLogSerializer(logs, many=True).data,
    })


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user').all()

    if not is_admin_user(request.user):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at', '-id')
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    """Retrieve an audit log"""
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not is_admin_user(request.user) and audit_log.user_id != request.user.pk:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
