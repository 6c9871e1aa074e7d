import os

from django.conf import settings
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .models import User, AuditLog

ALLOWED_PHOTO_EXTENSIONS = ('.jpeg', '.jpg', '.png', '.gif')


def validate_photo(photo):
    """Only small jpeg/png/gif images are accepted as user photos"""
    if photo is None:
        return photo
    extension = os.path.splitext(photo.name)[1].lower()
    if extension not in ALLOWED_PHOTO_EXTENSIONS:
        raise serializers.ValidationError('Photo must be a jpeg, jpg, png or gif image.')
    if photo.size > settings.USER_PHOTO_MAX_BYTES:
        raise serializers.ValidationError('Photo may not be larger than 2 MB.')
    return photo


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email', 'name', 'phone', 'role', 'status', 'photo', 'is_active', 'created_at', 'updated_at']
        read_only_fields = fields


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, min_length=8)
    password_confirm = serializers.CharField(write_only=True)
    photo = serializers.ImageField(required=False, allow_null=True, validators=[validate_photo])

    class Meta:
        model = User
        fields = ['email', 'name', 'phone', 'password', 'password_confirm', 'role', 'status', 'photo']
        extra_kwargs = {
            'role': {'required': True},
            'status': {'required': True},
        }

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password_confirm": "Passwords don't match"})
        candidate = User(email=attrs.get('email'), name=attrs.get('name', ''))
        try:
            validate_password(attrs['password'], user=candidate)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'password': list(e.messages)})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        if validated_data.get('photo') is None:
            validated_data.pop('photo', None)
        return User.objects.create_user(password=password, **validated_data)


class RegisterSerializer(UserCreateSerializer):
    """Self registration: role and status are fixed"""
    photo = None

    class Meta(UserCreateSerializer.Meta):
        fields = ['email', 'name', 'phone', 'password', 'password_confirm']
        extra_kwargs = {}

    def create(self, validated_data):
        validated_data['role'] = User.ROLE_USER
        validated_data['status'] = User.STATUS_ACTIVE
        return super().create(validated_data)


class UserRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class UserStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=User.STATUS_CHOICES)


class ChangePasswordSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True, min_length=8)
    new_password = serializers.CharField(write_only=True, min_length=8)
    new_password_confirm = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError('Current password is incorrect')
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['new_password_confirm']:
            raise serializers.ValidationError({'new_password_confirm': "Passwords don't match"})
        try:
            validate_password(attrs['new_password'], user=self.context['request'].user)
        except DjangoValidationError as e:
            raise serializers.ValidationError({'new_password': list(e.messages)})
        return attrs


class ProfileSerializer(serializers.ModelSerializer):
    photo = serializers.ImageField(required=False, allow_null=True, validators=[validate_photo])

    class Meta:
        model = User
        fields = ['name', 'email', 'phone', 'photo']
        extra_kwargs = {
            'name': {'required': False},
            'email': {'required': False},
        }

    def update(self, instance, validated_data):
        new_photo = validated_data.pop('photo', None)
        if new_photo is not None:
            # Replace the stored file instead of leaving the old one behind
            if instance.photo:
                instance.photo.delete(save=False)
            instance.photo = new_photo
        return super().update(instance, validated_data)


class AuditLogSerializer(serializers.ModelSerializer):
    user_email = serializers.CharField(source='user.email', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'user_email', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']
