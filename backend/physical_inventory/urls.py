from django.urls import path
from .views import session_list_create, session_detail, session_entries, session_complete, session_adjust

urlpatterns = [
    path('physical-inventory/sessions/', session_list_create, name='count-session-list-create'),
    path('physical-inventory/sessions/<int:pk>/', session_detail, name='count-session-detail'),
    path('physical-inventory/sessions/<int:pk>/entries/', session_entries, name='count-session-entries'),
    path('physical-inventory/sessions/<int:pk>/complete/', session_complete, name='count-session-complete'),
    path('physical-inventory/sessions/<int:pk>/adjust/', session_adjust, name='count-session-adjust'),
]
