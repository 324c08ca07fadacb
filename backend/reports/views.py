from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.core.permissions import IsEmployee
from .services import burial_dashboard, inventory_dashboard


@api_view(['GET'])
@permission_classes([IsEmployee])
def burial_dashboard_view(request):
    """Registrations, permits and plot occupancy at a glance"""
    return Response(burial_dashboard())


@api_view(['GET'])
@permission_classes([IsEmployee])
def inventory_dashboard_view(request):
    """Stock levels, pending work and alerts"""
    return Response(inventory_dashboard())
