from django.urls import path
from .views import (
    ris_list_create, ris_detail, ris_approve, ris_reject, ris_issue,
    issuance_list, issuance_detail, issuance_acknowledge,
    issuance_stats_summary, issuance_stats_by_department
)

urlpatterns = [
    path('ris/', ris_list_create, name='ris-list-create'),
    path('ris/<int:pk>/', ris_detail, name='ris-detail'),
    path('ris/<int:pk>/approve/', ris_approve, name='ris-approve'),
    path('ris/<int:pk>/reject/', ris_reject, name='ris-reject'),
    path('ris/<int:pk>/issue/', ris_issue, name='ris-issue'),
    path('issuances/', issuance_list, name='issuance-list'),
    path('issuances/stats/summary/', issuance_stats_summary, name='issuance-stats-summary'),
    path('issuances/stats/by-department/', issuance_stats_by_department, name='issuance-stats-by-department'),
    path('issuances/<int:pk>/', issuance_detail, name='issuance-detail'),
    path('issuances/<int:pk>/acknowledge/', issuance_acknowledge, name='issuance-acknowledge'),
]
