from django.contrib import admin
from .models import Company, Contact, Prospect, ActivityLog, Note, SupportTicket


class ContactInline(admin.TabularInline):
    model = Contact
    extra = 0
    fields = ['name', 'email', 'phone', 'role_title', 'is_primary']


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'short_name', 'rfc', 'stage', 'priority', 'owner', 'created_at']
    list_filter = ['stage', 'priority', 'is_supplier_too']
    search_fields = ['name', 'short_name', 'rfc']
    inlines = [ContactInline]


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'email', 'phone', 'is_primary']
    search_fields = ['name', 'email', 'company__name']


@admin.register(Prospect)
class ProspectAdmin(admin.ModelAdmin):
    list_display = ['name', 'stage', 'est_value', 'currency', 'priority', 'owner', 'created_at']
    list_filter = ['stage', 'priority', 'currency']
    search_fields = ['name', 'contact_name', 'email']


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['type', 'description', 'user', 'company', 'prospect', 'created_at']
    list_filter = ['type']
    search_fields = ['description']


@admin.register(Note)
class NoteAdmin(admin.ModelAdmin):
    list_display = ['entity_type', 'entity_id', 'user', 'created_at']
    list_filter = ['entity_type']


@admin.register(SupportTicket)
class SupportTicketAdmin(admin.ModelAdmin):
    list_display = ['subject', 'company', 'status', 'priority', 'assigned_to', 'created_at', 'closed_at']
    list_filter = ['status', 'priority']
    search_fields = ['subject', 'company__name']
