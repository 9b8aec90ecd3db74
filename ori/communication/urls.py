from django.urls import path
from .views import (
    account_list_create, account_detail,
    email_list, email_folder_counts, email_compose, email_detail, email_trash, email_mark_read,
    email_send_draft, email_retry, email_request_sync,
    signature_list_create, signature_detail,
    chat_group_list_create, chat_group_detail, chat_messages, chat_mark_read
)

urlpatterns = [
    path('email-accounts/', account_list_create, name='email-account-list-create'),
    path('email-accounts/<int:pk>/', account_detail, name='email-account-detail'),

    # Email endpoints
    path('emails/', email_list, name='email-list'),
    path('emails/counts/', email_folder_counts, name='email-folder-counts'),
    path('emails/compose/', email_compose, name='email-compose'),
    path('emails/sync/', email_request_sync, name='email-request-sync'),
    path('emails/<int:pk>/', email_detail, name='email-detail'),
    path('emails/<int:pk>/trash/', email_trash, name='email-trash'),
    path('emails/<int:pk>/read/', email_mark_read, name='email-mark-read'),
    path('emails/<int:pk>/send/', email_send_draft, name='email-send-draft'),
    path('emails/<int:pk>/retry/', email_retry, name='email-retry'),

    path('signatures/', signature_list_create, name='signature-list-create'),
    path('signatures/<int:pk>/', signature_detail, name='signature-detail'),

    # Chat endpoints
    path('chats/', chat_group_list_create, name='chat-group-list-create'),
    path('chats/<int:pk>/', chat_group_detail, name='chat-group-detail'),
    path('chats/<int:pk>/messages/', chat_messages, name='chat-messages'),
    path('chats/<int:pk>/read/', chat_mark_read, name='chat-mark-read'),
]
