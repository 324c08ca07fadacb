from django.contrib import admin
from .models import PhysicalCountSession, PhysicalCountEntry


class PhysicalCountEntryInline(admin.TabularInline):
    model = PhysicalCountEntry
    extra = 0
    readonly_fields = ['variance', 'discrepancy_value']


@admin.register(PhysicalCountSession)
class PhysicalCountSessionAdmin(admin.ModelAdmin):
    list_display = ['session_number', 'count_date', 'conducted_by', 'status', 'items_counted', 'discrepancies',
                    'adjustment_made']
    list_filter = ['status', 'adjustment_made']
    search_fields = ['session_number', 'conducted_by']
    inlines = [PhysicalCountEntryInline]
