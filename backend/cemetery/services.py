"""Cemetery hierarchy operations that span several tables"""
import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone

from backend.core.exceptions import ServiceError
from backend.core.utils import append_note, create_audit_log
from backend.registry.serializers import DeceasedRecordSerializer
from backend.registry.services import create_deceased
from .models import CemeteryBlock, CemeterySection, CemeteryPlot, PlotAssignment, Gravestone

logger = logging.getLogger('backend.cemetery')


@transaction.atomic
def delete_cemetery_tree(cemetery):
    """Delete a cemetery with everything under it, leaf tables first"""
    plots = CemeteryPlot.objects.filter(cemetery=cemetery)
    counts = {
        'assignments': PlotAssignment.objects.filter(plot__in=plots).delete()[0],
        'gravestones': Gravestone.objects.filter(plot__in=plots).delete()[0],
    }
    counts['plots'] = plots.delete()[0]
    counts['blocks'] = CemeteryBlock.objects.filter(section__cemetery=cemetery).delete()[0]
    counts['sections'] = CemeterySection.objects.filter(cemetery=cemetery).delete()[0]
    cemetery.delete()
    logger.info(f"Cascade-deleted cemetery {cemetery.name}: {counts}")
    return counts


def cemetery_statistics(cemetery):
    plot_stats = CemeteryPlot.objects.filter(cemetery=cemetery).aggregate(
        total=Count('id'),
        vacant=Count('id', filter=Q(status=CemeteryPlot.STATUS_VACANT)),
        reserved=Count('id', filter=Q(status=CemeteryPlot.STATUS_RESERVED)),
        occupied=Count('id', filter=Q(status=CemeteryPlot.STATUS_OCCUPIED)),
        blocked=Count('id', filter=Q(status=CemeteryPlot.STATUS_BLOCKED)),
    )
    total = plot_stats['total']
    occupancy_rate = round(plot_stats['occupied'] / total * 100, 2) if total else 0
    return {
        'totalPlots': total,
        'vacantPlots': plot_stats['vacant'],
        'reservedPlots': plot_stats['reserved'],
        'occupiedPlots': plot_stats['occupied'],
        'blockedPlots': plot_stats['blocked'],
        'totalAssignments': PlotAssignment.objects.filter(
            plot__cemetery=cemetery, status=PlotAssignment.STATUS_ASSIGNED
        ).count(),
        'occupancyRate': occupancy_rate,
        'totalSections': CemeterySection.objects.filter(cemetery=cemetery).count(),
        'totalBlocks': CemeteryBlock.objects.filter(section__cemetery=cemetery).count(),
    }


def _lock_plot(plot):
    return CemeteryPlot.objects.select_for_update().get(pk=plot.pk)


@transaction.atomic
def assign_occupant(plot, occupant_details, user=None, request=None):
    """
    Inter a deceased person in a free layer of the plot.
    occupant_details carries the deceased fields plus an optional layer.
    The PLOT_ASSIGNED audit entry commits with the assignment.
    """
    plot = _lock_plot(plot)
    if plot.status == CemeteryPlot.STATUS_BLOCKED:
        raise ServiceError('Plot is blocked and cannot be assigned', status_code=409)

    try:
        layer = int(occupant_details.get('layer') or 1)
    except (TypeError, ValueError):
        raise ServiceError('layer must be a whole number')
    if layer < 1 or layer > plot.max_layers:
        raise ServiceError(f'Layer {layer} exceeds the maximum of {plot.max_layers} layers for this plot')
    if layer in plot.occupied_layers():
        raise ServiceError(f'Layer {layer} is already occupied', status_code=409)

    serializer = DeceasedRecordSerializer(data=occupant_details)
    if not serializer.is_valid():
        raise ServiceError('Invalid occupant details', details=serializer.errors)
    deceased = create_deceased(serializer.validated_data)

    assignment = PlotAssignment.objects.create(
        plot=plot,
        deceased=deceased,
        layer=layer,
        assigned_by=user if user is not None and user.is_authenticated else None,
        notes=occupant_details.get('notes') or '',
    )
    plot.status = CemeteryPlot.STATUS_OCCUPIED
    plot.save(update_fields=['status', 'updated_at'])
    create_audit_log(request, action='PLOT_ASSIGNED', model_name='CemeteryPlot', object_id=plot.id,
                     object_name=plot.plot_code, user=user,
                     changes={'deceasedId': deceased.id, 'layer': layer})
    logger.info(f"Assigned {deceased.full_name} to plot {plot.plot_code} layer {layer}")
    return assignment


@transaction.atomic
def reserve_plot(plot, reservation_details, user=None, request=None):
    plot = _lock_plot(plot)
    if plot.status != CemeteryPlot.STATUS_VACANT:
        raise ServiceError(f'Only vacant plots can be reserved (plot is {plot.status})', status_code=409)

    reserved_for = reservation_details.get('reservedFor') or reservation_details.get('name') or 'unspecified'
    message = f'Reserved for {reserved_for}'
    if reservation_details.get('contactNumber'):
        message = f"{message} ({reservation_details['contactNumber']})"
    if reservation_details.get('notes'):
        message = f"{message}: {reservation_details['notes']}"
    plot.status = CemeteryPlot.STATUS_RESERVED
    plot.notes = append_note(plot.notes, message, label='RESERVATION')
    plot.save(update_fields=['status', 'notes', 'updated_at'])
    create_audit_log(request, action='PLOT_RESERVED', model_name='CemeteryPlot', object_id=plot.id,
                     object_name=plot.plot_code, user=user, changes=reservation_details)
    return plot


@transaction.atomic
def release_layer(plot, layer, status=PlotAssignment.STATUS_EXHUMED, user=None, request=None):
    """End the active assignment in a layer; the plot is vacant again once every layer is free"""
    plot = _lock_plot(plot)
    assignment = plot.assignments.filter(layer=layer, status=PlotAssignment.STATUS_ASSIGNED).first()
    if assignment is None:
        raise ServiceError(f'Layer {layer} has no active assignment', status_code=404)
    assignment.status = status
    assignment.released_at = timezone.now()
    assignment.save(update_fields=['status', 'released_at'])

    if not plot.occupied_layers():
        plot.status = CemeteryPlot.STATUS_VACANT
        plot.save(update_fields=['status', 'updated_at'])
    create_audit_log(request, action='PLOT_RELEASED', model_name='CemeteryPlot', object_id=plot.id,
                     object_name=plot.plot_code, user=user, changes={'layer': layer, 'status': status})
    return assignment


def search_occupants(name):
    """Active plot assignments whose deceased name matches"""
    assignments = (
        PlotAssignment.objects.filter(status=PlotAssignment.STATUS_ASSIGNED)
        .filter(
            Q(deceased__first_name__icontains=name) |
            Q(deceased__middle_name__icontains=name) |
            Q(deceased__last_name__icontains=name)
        )
        .select_related('deceased', 'plot', 'plot__section', 'plot__block', 'plot__cemetery')
        .prefetch_related('plot__gravestones')
        .order_by('deceased__last_name', 'deceased__first_name')
    )
    results = []
    for assignment in assignments[:50]:
        plot = assignment.plot
        deceased = assignment.deceased
        gravestone = next(iter(plot.gravestones.all()), None)
        results.append({
            'id': assignment.id,
            'deceasedName': deceased.full_name,
            'firstName': deceased.first_name,
            'lastName': deceased.last_name,
            'dateOfBirth': deceased.date_of_birth,
            'dateOfDeath': deceased.date_of_death,
            'burialDate': assignment.assigned_at.date(),
            'age': deceased.age,
            'gender': deceased.sex.lower(),
            'plotLocation': {
                'cemetery': plot.cemetery.name,
                'section': plot.section.name if plot.section else None,
                'block': plot.block.name if plot.block else None,
                'plotNumber': plot.plot_number,
                'layer': assignment.layer,
                'coordinates': [plot.latitude, plot.longitude] if plot.latitude is not None else None,
            },
            'gravestone': {
                'material': gravestone.material,
                'inscription': gravestone.inscription,
                'condition': gravestone.condition,
            } if gravestone else None,
        })
    return results
