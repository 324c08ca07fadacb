from django.urls import path
from .views import (
    CustomTokenRefreshView, register, login, social_login, verify_token, user_me,
    user_list_create, user_detail, user_stats,
    audit_log_list, audit_log_detail,
    health, health_db
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', login, name='login'),
    path('auth/social-login/', social_login, name='social-login'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/verify/', verify_token, name='verify-token'),
    path('auth/me/', user_me, name='user-me'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/stats/overview/', user_stats, name='user-stats'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    # Health
    path('health/', health, name='health'),
    path('health/db/', health_db, name='health-db'),
]
