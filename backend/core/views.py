import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.models import update_last_login
from django.core.exceptions import ObjectDoesNotExist
from django.db import connection, DatabaseError
from django.db.models import Count, Q
from django.shortcuts import get_object_or_404
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError
from rest_framework_simplejwt.serializers import TokenRefreshSerializer
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from .models import AuditLog
from .permissions import IsAdmin
from .serializers import (
    UserSerializer, UserSelfUpdateSerializer, RegisterSerializer, LoginSerializer,
    SocialLoginSerializer, AuditLogSerializer
)
from .utils import create_audit_log, paginate, parse_bool

User = get_user_model()
logger = logging.getLogger('backend.core')


def issue_tokens(user):
    """Access/refresh pair carrying the claims the portal needs for routing"""
    refresh = RefreshToken.for_user(user)
    refresh['email'] = user.email
    refresh['role'] = user.role
    return {
        'token': str(refresh.access_token),
        'refresh': str(refresh),
    }


def _auth_payload(user):
    return {'user': UserSerializer(user).data, **issue_tokens(user)}


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that answers 401 when the user behind the token is gone"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Create an account; only admins may register staff roles"""
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Registration validation failed: {serializer.errors}")
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    role = serializer.validated_data['role']
    if role != User.ROLE_CITIZEN:
        requester = request.user
        if not (requester and requester.is_authenticated and requester.is_admin):
            logger.warning(f"Rejected self-registration with role {role}")
            return Response({'error': 'Only administrators can create staff accounts'}, status=status.HTTP_403_FORBIDDEN)

    email = serializer.validated_data['email']
    if User.objects.filter(email=email).exists():
        return Response({'error': 'User already exists with this email'}, status=status.HTTP_409_CONFLICT)

    user = serializer.save()
    logger.info(f"Registered user {user.email} with role {user.role}")
    create_audit_log(request, action='USER_REGISTERED', model_name='User', object_id=user.id,
                     object_name=user.email, changes={'role': user.role}, user=user)
    return Response(_auth_payload(user), status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@authentication_classes([])
def login(request):
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    email = serializer.validated_data['email'].lower()
    password = serializer.validated_data['password']

    user = User.objects.filter(email=email).first()
    if user is None or not user.check_password(password):
        logger.warning(f"Failed login for {email}")
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        logger.warning(f"Login attempt on disabled account {email}")
        return Response({'error': 'Account is disabled'}, status=status.HTTP_401_UNAUTHORIZED)

    update_last_login(None, user)

    create_audit_log(request, action='USER_LOGIN', model_name='User', object_id=user.id,
                     object_name=user.email, user=user)
    return Response(_auth_payload(user))


@api_view(['POST'])
@permission_classes([AllowAny])
@authentication_classes([])
def social_login(request):
    """Sign in with a Google or Facebook identity, creating a citizen account on first use"""
    serializer = SocialLoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    provider = data['provider']
    id_field = f'{provider}_id'

    user = User.objects.filter(**{id_field: data['providerId']}).first()
    if user is None:
        user = User.objects.filter(email=data['email']).first()

    if user is not None:
        if not user.is_active:
            return Response({'error': 'Account is disabled'}, status=status.HTTP_401_UNAUTHORIZED)
        if getattr(user, id_field) != data['providerId']:
            setattr(user, id_field, data['providerId'])
            user.save(update_fields=[id_field, 'updated_at'])
        create_audit_log(request, action='SOCIAL_USER_LOGIN', model_name='User', object_id=user.id,
                         object_name=user.email, changes={'provider': provider}, user=user)
        return Response(_auth_payload(user))

    first_name = data['firstName']
    last_name = data['lastName']
    if not first_name and data['name']:
        first_name, _, last_name = data['name'].partition(' ')

    user = User.objects.create_user(
        email=data['email'],
        password=None,
        first_name=first_name,
        last_name=last_name,
        provider=provider,
        role=User.ROLE_CITIZEN,
        **{id_field: data['providerId']},
    )
    logger.info(f"Created {provider} user {user.email}")
    create_audit_log(request, action='SOCIAL_USER_CREATED', model_name='User', object_id=user.id,
                     object_name=user.email, changes={'provider': provider}, user=user)
    return Response(_auth_payload(user), status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def verify_token(request):
    return Response({'valid': True, 'user': UserSerializer(request.user).data})


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get or update the current user"""
    if request.method == 'GET':
        return Response(UserSerializer(request.user).data)

    serializer = UserSelfUpdateSerializer(request.user, data=request.data, partial=True)
    if serializer.is_valid():
        serializer.save()
        return Response(serializer.data)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


# User administration
@api_view(['GET', 'POST'])
@permission_classes([IsAdmin])
def user_list_create(request):
    """List users or create one with any role"""
    if request.method == 'GET':
        queryset = User.objects.all().order_by('-created_at')

        role = request.query_params.get('role')
        search = request.query_params.get('search')
        is_active = parse_bool(request.query_params.get('isActive'))

        if role:
            queryset = queryset.filter(role=role.upper())
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        if search:
            queryset = queryset.filter(
                Q(email__icontains=search) |
                Q(first_name__icontains=search) |
                Q(last_name__icontains=search)
            )

        users, pagination = paginate(request, queryset)
        return Response({'users': UserSerializer(users, many=True).data, 'pagination': pagination})

    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({'error': 'Validation Error', 'details': serializer.errors}, status=status.HTTP_400_BAD_REQUEST)
    if User.objects.filter(email=serializer.validated_data['email']).exists():
        return Response({'error': 'User already exists with this email'}, status=status.HTTP_409_CONFLICT)
    user = serializer.save()
    create_audit_log(request, action='USER_CREATED', model_name='User', object_id=user.id,
                     object_name=user.email, changes={'role': user.role})
    return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def user_detail(request, pk):
    """Retrieve, update or delete a user. Non-admins may only read themselves."""
    user = get_object_or_404(User, pk=pk)

    if not request.user.is_admin:
        if request.method != 'GET' or request.user.pk != user.pk:
            logger.warning(f"User {request.user.email} attempted to access user {pk}")
            return Response({'error': 'Insufficient permissions'}, status=status.HTTP_403_FORBIDDEN)
        return Response(UserSerializer(user).data)

    if request.method == 'GET':
        return Response(UserSerializer(user).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, action='USER_UPDATED', model_name='User', object_id=user.id,
                             object_name=user.email, changes=dict(request.data))
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        email = user.email
        user.delete()
        logger.info(f"User {email} deleted by {request.user.email}")
        create_audit_log(request, action='USER_DELETED', model_name='User', object_id=pk, object_name=email)
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAdmin])
def user_stats(request):
    by_role = {row['role']: row['total'] for row in User.objects.order_by().values('role').annotate(total=Count('id'))}
    active = User.objects.filter(is_active=True).count()
    total = User.objects.count()
    return Response({
        'total': total,
        'active': active,
        'inactive': total - active,
        'byRole': {role: by_role.get(role, 0) for role, _ in User.ROLE_CHOICES},
    })


# AuditLog views
@api_view(['GET'])
@permission_classes([IsAdmin])
def audit_log_list(request):
    queryset = AuditLog.objects.select_related('user')

    action = request.query_params.get('action')
    model_name = request.query_params.get('model_name')
    user_id = request.query_params.get('user')
    if action:
        queryset = queryset.filter(action=action)
    if model_name:
        queryset = queryset.filter(model_name=model_name)
    if user_id:
        queryset = queryset.filter(user_id=user_id)

    logs, pagination = paginate(request, queryset, default_limit=50)
    return Response({'logs': AuditLogSerializer(logs, many=True).data, 'pagination': pagination})


@api_view(['GET'])
@permission_classes([IsAdmin])
def audit_log_detail(request, pk):
    log = get_object_or_404(AuditLog.objects.select_related('user'), pk=pk)
    return Response(AuditLogSerializer(log).data)


# Health
@api_view(['GET'])
@permission_classes([AllowAny])
@authentication_classes([])
def health(request):
    return Response({
        'status': 'OK',
        'timestamp': timezone.now().isoformat(),
        'service': settings.SERVICE_NAME,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
@authentication_classes([])
def health_db(request):
    payload = {
        'status': 'OK',
        'timestamp': timezone.now().isoformat(),
        'service': settings.SERVICE_NAME,
    }
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        payload.update({'status': 'ERROR', 'database': 'disconnected'})
        return Response(payload, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    payload['database'] = 'connected'
    return Response(payload)
