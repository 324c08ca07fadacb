import django_filters
from django.db.models import Q
from .models import CemeteryPlot


class PlotFilter(django_filters.FilterSet):
    """
    Filter for cemetery plots. Accepts both the camelCase ids the map client
    sends and plain names.
    """
    cemeteryId = django_filters.NumberFilter(field_name='cemetery_id')
    sectionId = django_filters.NumberFilter(field_name='section_id')
    blockId = django_filters.NumberFilter(field_name='block_id')
    status = django_filters.CharFilter(method='filter_status')
    size = django_filters.CharFilter(field_name='size', lookup_expr='iexact')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = CemeteryPlot
        fields = ['cemeteryId', 'sectionId', 'blockId', 'status', 'size', 'search']

    def filter_status(self, queryset, name, value):
        statuses = [s.strip().upper() for s in value.split(',') if s.strip()]
        return queryset.filter(status__in=statuses) if statuses else queryset

    def filter_search(self, queryset, name, value):
        return queryset.filter(Q(plot_number__icontains=value) | Q(plot_code__icontains=value))
