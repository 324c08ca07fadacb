from django.urls import path
from .views import (
    registration_list_create, registration_detail, registration_status, registration_override,
    registration_document_upload, citizen_registrations, citizen_deceased,
    deceased_list_create, deceased_detail
)

urlpatterns = [
    path('death-registrations/', registration_list_create, name='death-registration-list-create'),
    path('death-registrations/<int:pk>/', registration_detail, name='death-registration-detail'),
    path('death-registrations/<int:pk>/status/', registration_status, name='death-registration-status'),
    path('death-registrations/<int:pk>/override/', registration_override, name='death-registration-override'),
    path('death-registrations/<int:pk>/documents/', registration_document_upload, name='death-registration-documents'),
    path('citizen/death-registrations/', citizen_registrations, name='citizen-death-registrations'),
    path('citizen/deceased/', citizen_deceased, name='citizen-deceased'),
    path('deceased/', deceased_list_create, name='deceased-list-create'),
    path('deceased/<int:pk>/', deceased_detail, name='deceased-detail'),
]
