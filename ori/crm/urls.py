from django.urls import path
from .views import (
    company_list_create, company_detail, company_move, company_pipeline, company_health,
    contact_list_create, contact_detail,
    prospect_list_create, prospect_detail, prospect_move, prospect_pipeline, prospect_convert,
    activity_list_create, note_list_create, note_detail,
    ticket_list_create, ticket_detail
)

urlpatterns = [
    # Company endpoints
    path('companies/', company_list_create, name='company-list-create'),
    path('companies/pipeline/', company_pipeline, name='company-pipeline'),
    path('companies/<int:pk>/', company_detail, name='company-detail'),
    path('companies/<int:pk>/move/', company_move, name='company-move'),
    path('companies/<int:pk>/health/', company_health, name='company-health'),

    # Contact endpoints
    path('contacts/', contact_list_create, name='contact-list-create'),
    path('contacts/<int:pk>/', contact_detail, name='contact-detail'),

    # Prospect endpoints
    path('prospects/', prospect_list_create, name='prospect-list-create'),
    path('prospects/pipeline/', prospect_pipeline, name='prospect-pipeline'),
    path('prospects/<int:pk>/', prospect_detail, name='prospect-detail'),
    path('prospects/<int:pk>/move/', prospect_move, name='prospect-move'),
    path('prospects/<int:pk>/convert/', prospect_convert, name='prospect-convert'),

    # Timeline endpoints
    path('activities/', activity_list_create, name='activity-list-create'),
    path('notes/', note_list_create, name='note-list-create'),
    path('notes/<int:pk>/', note_detail, name='note-detail'),

    # Support ticket endpoints
    path('tickets/', ticket_list_create, name='ticket-list-create'),
    path('tickets/<int:pk>/', ticket_detail, name='ticket-detail'),
]
