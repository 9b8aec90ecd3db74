from django.contrib import admin
from .models import Brand, ImportSource, ImportHistory, Candidate


@admin.register(Brand)
class BrandAdmin(admin.ModelAdmin):
    list_display = ['name', 'website', 'created_at']
    search_fields = ['name']


@admin.register(ImportSource)
class ImportSourceAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'created_at']


@admin.register(ImportHistory)
class ImportHistoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'source', 'status', 'total_processed', 'new_candidates', 'duplicates_skipped',
                    'imported_by', 'created_at']
    list_filter = ['status', 'source']
    readonly_fields = ['created_at', 'finished_at']


@admin.register(Candidate)
class CandidateAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'state', 'status', 'brand', 'average_rating', 'profile_views', 'created_at']
    list_filter = ['status', 'state', 'brand']
    search_fields = ['name', 'address', 'google_place_id', 'email']
    raw_id_fields = ['import_history', 'prospect']
