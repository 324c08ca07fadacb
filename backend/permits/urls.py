from django.urls import path
from .views import permit_list_create, permit_detail, permit_status, permit_override

urlpatterns = [
    path('permits/', permit_list_create, name='permit-list-create'),
    path('permits/<int:pk>/', permit_detail, name='permit-detail'),
    path('permits/<int:pk>/status/', permit_status, name='permit-status'),
    path('permits/<int:pk>/override/', permit_override, name='permit-override'),
]
