from django.contrib import admin
from .models import RISRequest, RISItem, Issuance, IssuanceItem


class RISItemInline(admin.TabularInline):
    model = RISItem
    extra = 0


class IssuanceItemInline(admin.TabularInline):
    model = IssuanceItem
    extra = 0


@admin.register(RISRequest)
class RISRequestAdmin(admin.ModelAdmin):
    list_display = ['ris_number', 'department', 'requested_by', 'status', 'date_needed', 'created_at']
    list_filter = ['status', 'department']
    search_fields = ['ris_number', 'requested_by', 'purpose']
    inlines = [RISItemInline]


@admin.register(Issuance)
class IssuanceAdmin(admin.ModelAdmin):
    list_display = ['issuance_number', 'ris', 'issued_to', 'department', 'issued_at', 'acknowledged_at']
    search_fields = ['issuance_number', 'issued_to']
    inlines = [IssuanceItemInline]
