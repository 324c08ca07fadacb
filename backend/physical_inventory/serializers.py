from rest_framework import serializers
from .models import PhysicalCountSession, PhysicalCountEntry


class PhysicalCountEntrySerializer(serializers.ModelSerializer):
    itemId = serializers.IntegerField(source='item_id', read_only=True)
    itemCode = serializers.CharField(source='item.item_code', read_only=True)
    itemName = serializers.CharField(source='item.item_name', read_only=True)
    systemQuantity = serializers.IntegerField(source='system_quantity', read_only=True)
    actualQuantity = serializers.IntegerField(source='actual_quantity', read_only=True)
    unitCost = serializers.DecimalField(source='unit_cost', max_digits=12, decimal_places=2, read_only=True)
    discrepancyValue = serializers.DecimalField(source='discrepancy_value', max_digits=14, decimal_places=2,
                                                read_only=True)

    class Meta:
        model = PhysicalCountEntry
        fields = ['id', 'itemId', 'itemCode', 'itemName', 'systemQuantity', 'actualQuantity', 'variance',
                  'unitCost', 'discrepancyValue', 'remarks']
        read_only_fields = ['variance', 'remarks']


class PhysicalCountSessionSerializer(serializers.ModelSerializer):
    sessionNumber = serializers.CharField(source='session_number', read_only=True)
    countDate = serializers.DateField(source='count_date', required=False)
    conductedBy = serializers.CharField(source='conducted_by', max_length=200)
    itemsCounted = serializers.IntegerField(source='items_counted', read_only=True)
    adjustmentMade = serializers.BooleanField(source='adjustment_made', read_only=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = PhysicalCountSession
        fields = ['id', 'sessionNumber', 'countDate', 'conductedBy', 'status', 'remarks', 'itemsCounted',
                  'discrepancies', 'adjustmentMade', 'completedAt', 'createdAt']
        read_only_fields = ['status', 'discrepancies']
        extra_kwargs = {'remarks': {'required': False}}


class PhysicalCountSessionDetailSerializer(PhysicalCountSessionSerializer):
    entries = PhysicalCountEntrySerializer(many=True, read_only=True)

    class Meta(PhysicalCountSessionSerializer.Meta):
        fields = PhysicalCountSessionSerializer.Meta.fields + ['entries']
