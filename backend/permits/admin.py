from django.contrib import admin
from .models import Permit


@admin.register(Permit)
class PermitAdmin(admin.ModelAdmin):
    list_display = ['permit_number', 'permit_type', 'status', 'amount_due', 'pickup_status', 'created_at']
    list_filter = ['permit_type', 'status', 'pickup_status']
    search_fields = ['permit_number', 'deceased__last_name', 'requested_by__email']
    readonly_fields = ['permit_number', 'issued_at', 'created_at', 'updated_at']
    raw_id_fields = ['death_registration', 'deceased', 'plot', 'requested_by']
