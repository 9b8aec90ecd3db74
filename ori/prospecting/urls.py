from django.urls import path
from .views import (
    brand_list_create, brand_detail, source_list_create, source_detail,
    candidate_import, candidate_check_duplicates, import_history_list, import_history_detail,
    candidate_list_create, candidate_detail, candidate_approve, candidate_reject, candidate_blacklist,
    candidate_set_status, candidate_map, candidate_stats
)

urlpatterns = [
    path('brands/', brand_list_create, name='brand-list-create'),
    path('brands/<int:pk>/', brand_detail, name='brand-detail'),
    path('import-sources/', source_list_create, name='import-source-list-create'),
    path('import-sources/<int:pk>/', source_detail, name='import-source-detail'),

    # Import endpoints
    path('candidates/import/', candidate_import, name='candidate-import'),
    path('candidates/check-duplicates/', candidate_check_duplicates, name='candidate-check-duplicates'),
    path('import-history/', import_history_list, name='import-history-list'),
    path('import-history/<int:pk>/', import_history_detail, name='import-history-detail'),

    # Candidate endpoints
    path('candidates/', candidate_list_create, name='candidate-list-create'),
    path('candidates/map/', candidate_map, name='candidate-map'),
    path('candidates/stats/', candidate_stats, name='candidate-stats'),
    path('candidates/<int:pk>/', candidate_detail, name='candidate-detail'),
    path('candidates/<int:pk>/approve/', candidate_approve, name='candidate-approve'),
    path('candidates/<int:pk>/reject/', candidate_reject, name='candidate-reject'),
    path('candidates/<int:pk>/blacklist/', candidate_blacklist, name='candidate-blacklist'),
    path('candidates/<int:pk>/status/', candidate_set_status, name='candidate-set-status'),
]
