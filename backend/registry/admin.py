from django.contrib import admin
from .models import DeceasedRecord, DeathRegistration, RegistrationDocument


@admin.register(DeceasedRecord)
class DeceasedRecordAdmin(admin.ModelAdmin):
    list_display = ['last_name', 'first_name', 'sex', 'date_of_birth', 'date_of_death', 'age']
    list_filter = ['sex', 'civil_status']
    search_fields = ['first_name', 'middle_name', 'last_name']
    readonly_fields = ['age', 'created_at', 'updated_at']


class RegistrationDocumentInline(admin.TabularInline):
    model = RegistrationDocument
    extra = 0
    readonly_fields = ['uploaded_at']


@admin.register(DeathRegistration)
class DeathRegistrationAdmin(admin.ModelAdmin):
    list_display = ['registration_number', 'registration_type', 'deceased', 'status', 'amount_due', 'created_at']
    list_filter = ['registration_type', 'status', 'pickup_status']
    search_fields = ['registration_number', 'deceased__last_name', 'informant_name']
    readonly_fields = ['registration_number', 'created_at', 'updated_at']
    raw_id_fields = ['deceased', 'submitted_by', 'verified_by']
    inlines = [RegistrationDocumentInline]
