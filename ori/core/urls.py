from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, user_me, complete_onboarding,
    user_list_create, user_detail,
    role_list_create, role_detail,
    team_list_create, team_detail,
    invitation_list_create, invitation_detail, invitation_lookup, invitation_accept,
    setting_list_create, setting_detail,
    audit_log_list, audit_log_detail,
    notification_list, notification_unread_count, notification_mark_read, notification_mark_all_read,
    global_search
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/me/onboarding/', complete_onboarding, name='user-complete-onboarding'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # Roles and teams
    path('roles/', role_list_create, name='role-list-create'),
    path('roles/<int:pk>/', role_detail, name='role-detail'),
    path('teams/', team_list_create, name='team-list-create'),
    path('teams/<int:pk>/', team_detail, name='team-detail'),

    # Invitations
    path('invitations/', invitation_list_create, name='invitation-list-create'),
    path('invitations/<int:pk>/', invitation_detail, name='invitation-detail'),
    path('invitations/token/<str:token>/', invitation_lookup, name='invitation-lookup'),
    path('invitations/token/<str:token>/accept/', invitation_accept, name='invitation-accept'),

    # Setting endpoints
    path('settings/', setting_list_create, name='setting-list-create'),
    path('settings/<int:pk>/', setting_detail, name='setting-detail'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),

    # Notifications
    path('notifications/', notification_list, name='notification-list'),
    path('notifications/unread-count/', notification_unread_count, name='notification-unread-count'),
    path('notifications/<int:pk>/read/', notification_mark_read, name='notification-mark-read'),
    path('notifications/read-all/', notification_mark_all_read, name='notification-mark-all-read'),

    # Global search endpoint
    path('search/', global_search, name='global-search'),
]
