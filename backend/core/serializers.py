from rest_framework import serializers
from .models import User, AuditLog


class UserSerializer(serializers.ModelSerializer):
    firstName = serializers.CharField(source='first_name', required=False, allow_blank=True)
    middleName = serializers.CharField(source='middle_name', required=False, allow_blank=True)
    lastName = serializers.CharField(source='last_name', required=False, allow_blank=True)
    suffix = serializers.CharField(source='name_suffix', required=False, allow_blank=True)
    fullName = serializers.CharField(source='full_name', read_only=True)
    contactNo = serializers.CharField(source='contact_no', required=False, allow_blank=True)
    isActive = serializers.BooleanField(source='is_active', required=False)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'role', 'firstName', 'middleName', 'lastName', 'suffix', 'fullName',
                  'contactNo', 'address', 'organization', 'provider', 'isActive', 'createdAt', 'updatedAt']
        read_only_fields = ['provider']

    def validate_email(self, value):
        value = value.lower()
        queryset = User.objects.filter(email=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError('A user with this email already exists')
        return value


class UserSelfUpdateSerializer(UserSerializer):
    """Profile fields a user may change on their own record"""
    isActive = serializers.BooleanField(source='is_active', read_only=True)

    class Meta(UserSerializer.Meta):
        read_only_fields = ['provider', 'role', 'email']


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=8)
    firstName = serializers.CharField(max_length=150)
    lastName = serializers.CharField(max_length=150)
    middleName = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    suffix = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    contactNo = serializers.CharField(max_length=20, required=False, allow_blank=True, default='')
    address = serializers.CharField(required=False, allow_blank=True, default='')
    organization = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES, required=False, default=User.ROLE_CITIZEN)

    def validate_email(self, value):
        return value.lower()

    def create(self, validated_data):
        return User.objects.create_user(
            email=validated_data['email'],
            password=validated_data['password'],
            first_name=validated_data['firstName'],
            last_name=validated_data['lastName'],
            middle_name=validated_data['middleName'],
            name_suffix=validated_data['suffix'],
            contact_no=validated_data['contactNo'],
            address=validated_data['address'],
            organization=validated_data['organization'],
            role=validated_data['role'],
        )


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class SocialLoginSerializer(serializers.Serializer):
    PROVIDERS = ['google', 'facebook']

    email = serializers.EmailField()
    providerId = serializers.CharField(max_length=255)
    provider = serializers.CharField(max_length=20)
    name = serializers.CharField(required=False, allow_blank=True, default='')
    firstName = serializers.CharField(required=False, allow_blank=True, default='')
    lastName = serializers.CharField(required=False, allow_blank=True, default='')

    def validate_email(self, value):
        return value.lower()

    def validate_provider(self, value):
        value = value.lower()
        if value not in self.PROVIDERS:
            raise serializers.ValidationError(f'Unsupported provider: {value}')
        return value


class AuditLogSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'action', 'model_name', 'object_id', 'object_name',
                  'changes', 'ip_address', 'created_at']

    def get_user(self, obj):
        if obj.user is None:
            return None
        return {'id': obj.user.id, 'email': obj.user.email, 'name': obj.user.full_name}
