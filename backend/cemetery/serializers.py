from rest_framework import serializers
from .geometry import is_valid_boundary, cemetery_center
from .models import Cemetery, CemeterySection, CemeteryBlock, CemeteryPlot, PlotAssignment, Gravestone


def validate_boundary_points(value):
    if value in (None, ''):
        return []
    if not is_valid_boundary(value):
        raise serializers.ValidationError('Boundary must be a list of [lat, lng] pairs')
    return [[float(lat), float(lng)] for lat, lng in value]


class CemeterySerializer(serializers.ModelSerializer):
    postalCode = serializers.CharField(source='postal_code', max_length=10, required=False, allow_blank=True)
    establishedDate = serializers.DateField(source='established_date', required=False, allow_null=True)
    totalArea = serializers.FloatField(source='total_area', required=False, allow_null=True)
    standardPrice = serializers.DecimalField(source='standard_price', max_digits=10, decimal_places=2, required=False)
    largePrice = serializers.DecimalField(source='large_price', max_digits=10, decimal_places=2, required=False)
    familyPrice = serializers.DecimalField(source='family_price', max_digits=10, decimal_places=2, required=False)
    nichePrice = serializers.DecimalField(source='niche_price', max_digits=10, decimal_places=2, required=False)
    maintenanceFee = serializers.DecimalField(source='maintenance_fee', max_digits=10, decimal_places=2, required=False)
    isActive = serializers.BooleanField(source='is_active', required=False)
    center = serializers.SerializerMethodField()
    _count = serializers.SerializerMethodField(method_name='get_counts')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Cemetery
        fields = ['id', 'name', 'description', 'address', 'city', 'postalCode', 'establishedDate',
                  'totalArea', 'boundary', 'standardPrice', 'largePrice', 'familyPrice', 'nichePrice',
                  'maintenanceFee', 'isActive', 'center', '_count', 'createdAt', 'updatedAt']

    def validate_boundary(self, value):
        return validate_boundary_points(value)

    def get_center(self, obj):
        lat, lng = cemetery_center(obj.boundary)
        return {'lat': lat, 'lng': lng}

    def get_counts(self, obj):
        plots = getattr(obj, 'plot_count', None)
        sections = getattr(obj, 'section_count', None)
        return {
            'plots': plots if plots is not None else obj.plots.count(),
            'sections': sections if sections is not None else obj.sections.count(),
        }


class CemeteryBlockSerializer(serializers.ModelSerializer):
    sectionId = serializers.PrimaryKeyRelatedField(source='section', queryset=CemeterySection.objects.all())
    blockType = serializers.CharField(source='block_type', required=False)
    _count = serializers.SerializerMethodField(method_name='get_counts')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = CemeteryBlock
        fields = ['id', 'sectionId', 'name', 'blockType', 'capacity', 'boundary', '_count', 'createdAt']

    def validate_blockType(self, value):
        value = (value or 'STANDARD').upper()
        if value not in dict(CemeteryBlock.BLOCK_TYPE_CHOICES):
            raise serializers.ValidationError(f'Invalid block type: {value}')
        return value

    def validate_boundary(self, value):
        return validate_boundary_points(value)

    def get_counts(self, obj):
        plots = getattr(obj, 'plot_count', None)
        return {'plots': plots if plots is not None else obj.plots.count()}


class CemeterySectionSerializer(serializers.ModelSerializer):
    cemeteryId = serializers.PrimaryKeyRelatedField(source='cemetery', queryset=Cemetery.objects.all())
    _count = serializers.SerializerMethodField(method_name='get_counts')
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = CemeterySection
        fields = ['id', 'cemeteryId', 'name', 'description', 'capacity', 'boundary', '_count', 'createdAt']

    def validate_boundary(self, value):
        return validate_boundary_points(value)

    def get_counts(self, obj):
        blocks = getattr(obj, 'block_count', None)
        plots = getattr(obj, 'plot_count', None)
        return {
            'blocks': blocks if blocks is not None else obj.blocks.count(),
            'plots': plots if plots is not None else obj.plots.count(),
        }


class CemeterySectionTreeSerializer(CemeterySectionSerializer):
    blocks = CemeteryBlockSerializer(many=True, read_only=True)

    class Meta(CemeterySectionSerializer.Meta):
        fields = CemeterySectionSerializer.Meta.fields + ['blocks']


class CemeteryDetailSerializer(CemeterySerializer):
    sections = CemeterySectionTreeSerializer(many=True, read_only=True)

    class Meta(CemeterySerializer.Meta):
        fields = CemeterySerializer.Meta.fields + ['sections']


class PlotAssignmentSerializer(serializers.ModelSerializer):
    deceased = serializers.SerializerMethodField()
    assignedAt = serializers.DateTimeField(source='assigned_at', read_only=True)
    releasedAt = serializers.DateTimeField(source='released_at', read_only=True)

    class Meta:
        model = PlotAssignment
        fields = ['id', 'layer', 'status', 'deceased', 'assignedAt', 'releasedAt', 'notes']

    def get_deceased(self, obj):
        d = obj.deceased
        return {
            'id': d.id,
            'fullName': d.full_name,
            'dateOfBirth': d.date_of_birth,
            'dateOfDeath': d.date_of_death,
            'age': d.age,
        }


class CemeteryPlotSerializer(serializers.ModelSerializer):
    cemeteryId = serializers.PrimaryKeyRelatedField(source='cemetery', queryset=Cemetery.objects.all())
    sectionId = serializers.PrimaryKeyRelatedField(source='section', queryset=CemeterySection.objects.all(), required=False, allow_null=True)
    blockId = serializers.PrimaryKeyRelatedField(source='block', queryset=CemeteryBlock.objects.all(), required=False, allow_null=True)
    plotNumber = serializers.CharField(source='plot_number', max_length=50)
    plotCode = serializers.CharField(source='plot_code', max_length=50, required=False, allow_blank=True)
    baseFee = serializers.DecimalField(source='base_fee', max_digits=10, decimal_places=2, required=False)
    maintenanceFee = serializers.DecimalField(source='maintenance_fee', max_digits=10, decimal_places=2, required=False)
    maxLayers = serializers.IntegerField(source='max_layers', required=False, min_value=1)
    occupiedLayers = serializers.SerializerMethodField()
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = CemeteryPlot
        fields = ['id', 'cemeteryId', 'sectionId', 'blockId', 'plotNumber', 'plotCode', 'latitude', 'longitude',
                  'boundary', 'size', 'length', 'width', 'depth', 'baseFee', 'maintenanceFee', 'orientation',
                  'accessibility', 'status', 'maxLayers', 'occupiedLayers', 'notes', 'createdAt', 'updatedAt']
        # Duplicate plot numbers are answered with 409 by the view
        validators = []

    def to_internal_value(self, data):
        if hasattr(data, 'get'):
            upper = {key: data[key].upper() for key in ('size', 'orientation', 'status')
                     if isinstance(data.get(key), str)}
            if upper:
                data = {**data, **upper}
        return super().to_internal_value(data)

    def validate_boundary(self, value):
        return validate_boundary_points(value)

    def validate(self, attrs):
        cemetery = attrs.get('cemetery', getattr(self.instance, 'cemetery', None))
        section = attrs.get('section', getattr(self.instance, 'section', None))
        block = attrs.get('block', getattr(self.instance, 'block', None))
        if block is not None:
            if section is None:
                attrs['section'] = section = block.section
            if block.section_id != section.id:
                raise serializers.ValidationError({'blockId': 'Block does not belong to this section'})
        if section is not None and section.cemetery_id != cemetery.id:
            raise serializers.ValidationError({'sectionId': 'Section does not belong to this cemetery'})
        return attrs

    def get_occupiedLayers(self, obj):
        return sorted(
            a.layer for a in obj.assignments.all() if a.status == PlotAssignment.STATUS_ASSIGNED
        )


class CemeteryPlotDetailSerializer(CemeteryPlotSerializer):
    assignments = PlotAssignmentSerializer(many=True, read_only=True)
    gravestones = serializers.SerializerMethodField()

    class Meta(CemeteryPlotSerializer.Meta):
        fields = CemeteryPlotSerializer.Meta.fields + ['assignments', 'gravestones']

    def get_gravestones(self, obj):
        return GravestoneSerializer(obj.gravestones.all(), many=True).data


class GravestoneSerializer(serializers.ModelSerializer):
    plotId = serializers.PrimaryKeyRelatedField(source='plot', queryset=CemeteryPlot.objects.all())
    dateInstalled = serializers.DateField(source='date_installed', required=False, allow_null=True)
    deceasedInfo = serializers.CharField(source='deceased_info', required=False, allow_blank=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Gravestone
        fields = ['id', 'plotId', 'material', 'inscription', 'dateInstalled', 'condition', 'height',
                  'width', 'thickness', 'manufacturer', 'deceasedInfo', 'createdAt', 'updatedAt']

    def to_internal_value(self, data):
        if hasattr(data, 'get'):
            upper = {key: data[key].upper() for key in ('material', 'condition') if isinstance(data.get(key), str)}
            if upper:
                data = {**data, **upper}
        return super().to_internal_value(data)
