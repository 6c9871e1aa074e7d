from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, logout, user_me, add_default_user,
    user_list_create, user_detail, user_update_role, user_update_status,
    change_password, update_profile, user_activity_log,
    audit_log_list, audit_log_detail
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout/', logout, name='logout'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/add-default-user/', add_default_user, name='add-default-user'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/change-password/', change_password, name='user-change-password'),
    path('users/update-profile/', update_profile, name='user-update-profile'),
    path('users/<int:pk>/', user_detail, name='user-detail'),
    path('users/<int:pk>/role/', user_update_role, name='user-update-role'),
    path('users/<int:pk>/status/', user_update_status, name='user-update-status'),
    path('users/<int:pk>/activity-log/', user_activity_log, name='user-activity-log'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
