from django.urls import path
from . import views

urlpatterns = [
    path('reports/sales-dashboard/', views.sales_dashboard, name='sales-dashboard'),
    path('reports/pipeline/', views.pipeline_summary, name='pipeline-summary'),
    path('reports/inventory-summary/', views.inventory_summary, name='inventory-summary'),
    path('reports/cash-flow/', views.cash_flow, name='cash-flow'),
    path('reports/receivables/', views.receivables_summary, name='receivables-summary'),
    path('reports/tasks/', views.tasks_summary, name='tasks-summary'),
]
