from django.contrib import admin
from .models import Cemetery, CemeterySection, CemeteryBlock, CemeteryPlot, PlotAssignment, Gravestone


@admin.register(Cemetery)
class CemeteryAdmin(admin.ModelAdmin):
    list_display = ['name', 'city', 'total_area', 'is_active', 'created_at']
    list_filter = ['is_active', 'city']
    search_fields = ['name', 'address', 'city']
    ordering = ['name']


@admin.register(CemeterySection)
class CemeterySectionAdmin(admin.ModelAdmin):
    list_display = ['name', 'cemetery', 'capacity']
    list_filter = ['cemetery']
    search_fields = ['name']


@admin.register(CemeteryBlock)
class CemeteryBlockAdmin(admin.ModelAdmin):
    list_display = ['name', 'section', 'block_type', 'capacity']
    list_filter = ['block_type', 'section__cemetery']
    search_fields = ['name']


class PlotAssignmentInline(admin.TabularInline):
    model = PlotAssignment
    extra = 0
    raw_id_fields = ['deceased', 'assigned_by']


@admin.register(CemeteryPlot)
class CemeteryPlotAdmin(admin.ModelAdmin):
    list_display = ['plot_code', 'cemetery', 'section', 'block', 'size', 'status', 'max_layers']
    list_filter = ['status', 'size', 'cemetery']
    search_fields = ['plot_number', 'plot_code']
    inlines = [PlotAssignmentInline]


@admin.register(Gravestone)
class GravestoneAdmin(admin.ModelAdmin):
    list_display = ['plot', 'material', 'condition', 'date_installed']
    list_filter = ['material', 'condition']
    search_fields = ['inscription', 'plot__plot_code']
