from django.contrib import admin
from .models import EmailAccount, Email, SignatureTemplate, ChatGroup, ChatMessage


@admin.register(EmailAccount)
class EmailAccountAdmin(admin.ModelAdmin):
    list_display = ['email', 'user', 'provider', 'is_active', 'sync_status', 'last_sync_at']
    list_filter = ['provider', 'is_active', 'sync_status']
    search_fields = ['email', 'user__username']
    exclude = ['password', 'api_key']


@admin.register(Email)
class EmailAdmin(admin.ModelAdmin):
    list_display = ['subject', 'account', 'from_email', 'folder', 'status', 'delivery_status', 'timestamp']
    list_filter = ['folder', 'status', 'delivery_status']
    search_fields = ['subject', 'from_email', 'provider_message_id']


@admin.register(SignatureTemplate)
class SignatureTemplateAdmin(admin.ModelAdmin):
    list_display = ['name', 'owner', 'is_default']


class ChatMessageInline(admin.TabularInline):
    model = ChatMessage
    extra = 0
    fields = ['sender', 'text', 'created_at']
    readonly_fields = ['created_at']


@admin.register(ChatGroup)
class ChatGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_direct', 'created_by', 'created_at']
    inlines = [ChatMessageInline]
